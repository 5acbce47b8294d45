"""
Intake adapter system:
- PlainTextAdapter (text)
- JsonNoteAdapter (JSON wrapper, raw fallback)
- factory get_adapter / source_for
- validate() rejects empty notes
"""

import json
import pytest

from dme.exceptions import ValidationError
from dme.intake import get_adapter, source_for
from dme.intake.adapters import JsonNoteAdapter, PlainTextAdapter
from dme.intake.types import NoteInput
from tests.conftest import CPAP_NOTE, OXYGEN_NOTE


# ── PlainTextAdapter ──────────────────────────────────────────────────────

class TestPlainTextAdapter:

    def test_bytes_body(self):
        note = PlainTextAdapter(raw_body=OXYGEN_NOTE.encode('utf-8')).process()
        assert isinstance(note, NoteInput)
        assert note.text == OXYGEN_NOTE
        assert note.source == 'text'

    def test_bom_is_stripped(self):
        note = PlainTextAdapter(raw_body=b'\xef\xbb\xbf' + CPAP_NOTE.encode('utf-8')).process()
        assert note.text == CPAP_NOTE

    def test_surrounding_whitespace_trimmed(self):
        note = PlainTextAdapter(raw_body='\n\n  ' + CPAP_NOTE + '  \n').process()
        assert note.text == CPAP_NOTE

    def test_filename_carried(self):
        note = PlainTextAdapter(raw_body=CPAP_NOTE, filename='note1.txt').process()
        assert note.filename == 'note1.txt'

    @pytest.mark.parametrize('body', ['', '   \n', b''])
    def test_empty_note_rejected(self, body):
        with pytest.raises(ValidationError) as exc_info:
            PlainTextAdapter(raw_body=body).process()
        assert exc_info.value.code == 'EMPTY_NOTE'
        assert exc_info.value.http_status == 400


# ── JsonNoteAdapter ───────────────────────────────────────────────────────

class TestJsonNoteAdapter:

    @pytest.mark.parametrize('key', ['note', 'physician_note', 'text', 'content'])
    def test_wrapper_keys(self, key):
        note = JsonNoteAdapter(raw_body=json.dumps({key: CPAP_NOTE})).process()
        assert note.text == CPAP_NOTE
        assert note.source == 'json'

    def test_first_key_wins(self):
        body = json.dumps({'content': 'second', 'note': CPAP_NOTE})
        assert JsonNoteAdapter(raw_body=body).process().text == CPAP_NOTE

    def test_non_string_value_skipped(self):
        body = json.dumps({'note': {'nested': True}, 'text': CPAP_NOTE})
        assert JsonNoteAdapter(raw_body=body).process().text == CPAP_NOTE

    def test_raw_payload_kept(self):
        payload = {'note': CPAP_NOTE, 'source_system': 'ehr'}
        note = JsonNoteAdapter(raw_body=json.dumps(payload)).process()
        assert note.raw_payload == payload

    def test_unknown_keys_fall_back_to_raw_content(self):
        body = json.dumps({'message': 'oxygen please'})
        assert JsonNoteAdapter(raw_body=body).process().text == body

    def test_malformed_json_falls_back_to_raw_content(self):
        body = '{"note": "CPAP with nasal mask'
        note = JsonNoteAdapter(raw_body=body.encode('utf-8')).process()
        assert note.text == body

    def test_empty_wrapped_note_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            JsonNoteAdapter(raw_body=json.dumps({'note': '  '})).process()
        assert exc_info.value.code == 'EMPTY_NOTE'


# ── Factory ───────────────────────────────────────────────────────────────

class TestGetAdapter:

    def test_text(self):
        assert isinstance(get_adapter('text', CPAP_NOTE), PlainTextAdapter)

    def test_json(self):
        assert isinstance(get_adapter('json', '{}'), JsonNoteAdapter)

    def test_unknown_source(self):
        with pytest.raises(ValidationError) as exc_info:
            get_adapter('fax', CPAP_NOTE)
        assert exc_info.value.code == 'UNKNOWN_SOURCE'
        assert exc_info.value.detail['known_sources'] == ['text', 'json']


class TestSourceFor:

    @pytest.mark.parametrize('content_type, filename, expected', [
        ('application/json', '', 'json'),
        ('application/json; charset=utf-8', '', 'json'),
        ('text/plain', '', 'text'),
        ('', '', 'text'),
        ('', 'note.json', 'json'),
        ('', 'NOTE.TXT', 'text'),
        ('application/json', 'note.txt', 'text'),
        ('', 'README', 'text'),
    ])
    def test_detection(self, content_type, filename, expected):
        assert source_for(content_type=content_type, filename=filename) == expected

    def test_unsupported_extension(self):
        with pytest.raises(ValidationError) as exc_info:
            source_for(filename='scan.pdf')
        assert exc_info.value.code == 'UNSUPPORTED_EXTENSION'
