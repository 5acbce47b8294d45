"""
HTTP views. Parse the request, call the service layer, serialize.

Views only raise; unified_exception_handler renders every error.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import ValidationError
from .serializers import serialize_extraction, serialize_submission, serialize_submission_created
from .services import create_submission, extract_note, get_submission_detail, retry_submission

TRUE_VALUES = ('1', 'true', 'yes', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'off')


def _query_flag(request, name, default):
    raw = request.query_params.get(name)
    if raw is None or raw == '':
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValidationError(
        message=f"Query parameter '{name}' must be true or false.",
        code='INVALID_QUERY_PARAM',
        detail={'param': name, 'value': raw},
    )


class NoteExtractView(APIView):
    """
    POST /api/notes/extract/ - Extract a device order from a physician note

    Query params:
      source=text|json  override Content-Type detection
      llm=false         rule-based extraction only
      submit=true       queue the order for the DME order API (202)
    """

    def post(self, request):
        use_llm = _query_flag(request, 'llm', default=True)
        submit = _query_flag(request, 'submit', default=False)

        result = extract_note(
            request.body,
            source=request.query_params.get('source') or None,
            content_type=request.content_type or '',
            use_llm=use_llm,
        )

        if submit:
            submission = create_submission(result.value, result.strategy)
            return Response(serialize_submission_created(submission), status=status.HTTP_202_ACCEPTED)

        return Response(serialize_extraction(result.value, result.strategy))


class SubmissionDetailView(APIView):
    """GET /api/submissions/<submission_id>/ - Submission status"""

    def get(self, request, submission_id):
        submission = get_submission_detail(submission_id)
        return Response(serialize_submission(submission))


class SubmissionRetryView(APIView):
    """POST /api/submissions/<submission_id>/retry/ - Re-queue a failed submission"""

    def post(self, request, submission_id):
        submission = retry_submission(submission_id)
        return Response(serialize_submission(submission), status=status.HTTP_202_ACCEPTED)
