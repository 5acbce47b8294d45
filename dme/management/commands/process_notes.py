"""
python manage.py process_notes PATH [PATH ...]

A file: print the extracted order and write it to --output.
A directory: process every .txt / .json file inside, writing
<stem>_actual.json files into --output-dir.
"""

import json
import logging
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from dme.exceptions import BaseAppException
from dme.intake.factory import SUPPORTED_EXTENSIONS
from dme.serializers import serialize_device_order
from dme.services import extract_note, post_device_order

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Extract DME device orders from physician note files.'

    def add_arguments(self, parser):
        parser.add_argument('paths', nargs='+', help='Note files or directories of notes')
        parser.add_argument('--output', default='output.json',
                            help='Output file for a single note (default: output.json)')
        parser.add_argument('--output-dir', default='test_outputs',
                            help='Output directory for batch runs (default: test_outputs)')
        parser.add_argument('--submit', action='store_true',
                            help='POST each extracted order to the DME order API')
        parser.add_argument('--no-llm', action='store_true',
                            help='Use the rule-based parser only')

    def handle(self, *args, **options):
        failures = 0

        for raw_path in options['paths']:
            path = Path(raw_path)
            if path.is_dir():
                failures += self._process_directory(path, options)
            elif path.is_file():
                if not self._process_file(path, options, Path(options['output']), verbose=True):
                    failures += 1
            else:
                self.stderr.write(self.style.ERROR(f'File.NotFound: {path} does not exist'))
                failures += 1

        if failures:
            raise CommandError(f'{failures} note(s) failed to process.')

    # ── Batch ──────────────────────────────────────────────────────────────

    def _process_directory(self, directory, options):
        output_dir = Path(options['output_dir'])
        output_dir.mkdir(parents=True, exist_ok=True)

        notes = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
        )
        if not notes:
            self.stdout.write(f'No .txt or .json notes found in {directory}')
            return 0

        failures = 0
        for note_path in notes:
            target = output_dir / f'{note_path.stem}_actual.json'
            if not self._process_file(note_path, options, target, verbose=False):
                failures += 1

        self.stdout.write(f'Processed {len(notes)} note(s) from {directory}: '
                          f'{len(notes) - failures} succeeded, {failures} failed')
        return failures

    # ── One note ───────────────────────────────────────────────────────────

    def _process_file(self, path, options, target, verbose):
        try:
            result = extract_note(path.read_bytes(), filename=path.name, use_llm=not options['no_llm'])
        except BaseAppException as exc:
            self.stderr.write(self.style.ERROR(f'{path.name}: {exc.code}: {exc.message}'))
            for error in (exc.detail or {}).get('errors', [])[1:]:
                self.stderr.write(f"    {error['code']}: {error['message']}")
            return False

        order = result.value
        payload = serialize_device_order(order)
        rendered = json.dumps(payload, indent=2)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(rendered + '\n', encoding='utf-8')

        if verbose:
            self.stdout.write(rendered)
            self.stdout.write(self.style.SUCCESS(
                f'{path.name}: {order.device_type} order via {result.strategy}, saved to {target}'
            ))
        else:
            self.stdout.write(f'{path.name}: {order.device_type} ({result.strategy}) -> {target}')

        if options['submit']:
            self._submit(path, payload)
        return True

    def _submit(self, path, payload):
        try:
            outcome = post_device_order(payload)
        except BaseAppException as exc:
            logger.warning('Submission of %s failed: %s', path.name, exc.message)
            self.stderr.write(self.style.WARNING(f'{path.name}: submit failed: {exc.code}: {exc.message}'))
            return
        self.stdout.write(f"{path.name}: submitted (status={outcome['status_code']}, "
                          f"order_id={outcome['order_id']})")
