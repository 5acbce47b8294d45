"""
Response serializers: DeviceOrder / ORM objects → JSON-able dict.

Output formatting only; no parsing and no validation. Note parsing lives in
dme/intake/ and dme/extraction/.
"""

# taxonomy name → name the order API expects
DEVICE_OUTPUT_NAMES = {
    'Oxygen': 'Oxygen Tank',
}

BREATHING_DEVICES = ('CPAP', 'BiPAP')


def _qualifier_from_ahi(ahi):
    """'>20' → 'AHI > 20'."""
    return f"AHI > {ahi.lstrip('>').strip()}"


def _liters_from_flow_rate(flow_rate):
    """'2.5 L/min' → '2.5 L'."""
    if flow_rate.endswith(' L/min'):
        return flow_rate[:-len(' L/min')] + ' L'
    if 'L' not in flow_rate:
        return f'{flow_rate} L'
    return flow_rate


def serialize_device_order(order):
    """
    The payload posted to the order API.

    Key order: device, device-specific fields, diagnosis, ordering_provider,
    patient_name, dob. Missing device-specific values are left out rather
    than sent as null.
    """
    specs = order.specifications or {}
    payload = {
        'device': DEVICE_OUTPUT_NAMES.get(order.device_type, order.device_type),
    }

    if order.device_type in BREATHING_DEVICES:
        if specs.get('mask_type'):
            payload['mask_type'] = specs['mask_type']
        if specs.get('add_ons'):
            payload['add_ons'] = list(specs['add_ons'])
        if specs.get('ahi'):
            payload['qualifier'] = _qualifier_from_ahi(specs['ahi'])
        elif specs.get('qualifier'):
            payload['qualifier'] = specs['qualifier']
    elif order.device_type == 'Oxygen':
        if specs.get('flow_rate'):
            payload['liters'] = _liters_from_flow_rate(specs['flow_rate'])
        if specs.get('usage'):
            payload['usage'] = specs['usage']

    payload['diagnosis'] = order.diagnosis
    payload['ordering_provider'] = order.ordering_provider
    payload['patient_name'] = order.patient_name
    payload['dob'] = order.date_of_birth
    return payload


def serialize_extraction(order, strategy):
    """Serialize a successful extraction for the 200 response."""
    return {
        'payload': serialize_device_order(order),
        'device_type': order.device_type,
        'patient_id': order.patient_id,
        'specifications': dict(order.specifications or {}),
        'strategy': strategy,
        'ordered_at': order.ordered_at.isoformat(),
    }


def serialize_submission_created(submission):
    """Serialize a submission for the 202 response."""
    return {
        'submission_id': str(submission.id),
        'status': submission.status,
        'strategy': submission.strategy,
        'payload': submission.payload,
        'message': 'Device order extracted. Submission queued.',
        'created_at': submission.created_at.isoformat(),
    }


def serialize_submission(submission):
    """Serialize submission detail with status-dependent fields."""
    response = {
        'submission_id': str(submission.id),
        'status': submission.status,
        'device_type': submission.device_type,
        'patient_id': submission.patient_id,
        'patient_name': submission.patient_name,
        'ordering_provider': submission.ordering_provider,
        'strategy': submission.strategy,
        'attempts': submission.attempts,
        'payload': submission.payload,
        'created_at': submission.created_at.isoformat(),
        'updated_at': submission.updated_at.isoformat(),
    }

    if submission.status == 'pending':
        response['message'] = 'Order is queued for submission'
    elif submission.status == 'processing':
        response['message'] = 'Order is being submitted, please wait...'
    elif submission.status == 'submitted':
        response['message'] = 'Order submitted successfully'
        response['response_status_code'] = submission.response_status_code
        response['external_order_id'] = submission.external_order_id
        response['submitted_at'] = submission.submitted_at.isoformat() if submission.submitted_at else None
    elif submission.status == 'failed':
        response['message'] = 'Order submission failed'
        response['error'] = {
            'message': submission.error_message,
            'response_status_code': submission.response_status_code,
            'retry_allowed': True,
        }

    return response
