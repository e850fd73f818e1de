"""
Standard JSON renderer that wraps all DRF responses in a consistent envelope.

Success:  {"success": true,  "data": ..., "message": "OK"}
Error:    {"success": false, "error": {"code": ..., "message": ..., "details": ...}}

Pagination and exception-handler responses are already wrapped and passed through unchanged.
"""

from rest_framework.renderers import JSONRenderer


class StandardJSONRenderer(JSONRenderer):
    """
    Wraps raw DRF responses in the standard JSON envelope.
    Skips wrapping if the response is already wrapped (pagination, exceptions).
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        renderer_context = renderer_context or {}
        response = renderer_context.get('response')
        request = renderer_context.get('request')

        if data is None:
            data = {'success': True, 'data': None, 'message': 'OK'}
        elif isinstance(data, dict) and 'success' in data:
            pass
        elif response is not None and response.status_code >= 400:
            data = {
                'success': False,
                'error': {
                    'code': response.status_code,
                    'message': self._extract_message(data),
                    'details': data if isinstance(data, dict) else {'detail': data},
                },
            }
        else:
            method = getattr(request, 'method', 'GET') if request else 'GET'
            status_code = getattr(response, 'status_code', 200)
            data = {
                'success': True,
                'data': data,
                'message': self._method_message(method, status_code),
            }

        return super().render(data, accepted_media_type, renderer_context)

    @staticmethod
    def _method_message(method, status_code):
        if method == 'POST':
            return 'Created successfully.' if status_code == 201 else 'OK'
        return {
            'PUT': 'Updated successfully.',
            'PATCH': 'Updated successfully.',
        }.get(method, 'OK')

    @staticmethod
    def _extract_message(data):
        if isinstance(data, dict):
            return data.get('detail', data.get('message', 'Error'))
        if isinstance(data, list) and data:
            return str(data[0])
        return str(data) if data else 'Error'
