from rest_framework import status as http_status
from rest_framework.response import Response


def success(data=None, status=http_status.HTTP_200_OK, **extra):
    """
    Wraps a payload in the {success: true, data} envelope used by every endpoint.
    Extra keyword arguments (count, message, ...) are added at the top level.
    """
    body = {'success': True}
    body.update(extra)
    if data is not None:
        body['data'] = data
    return Response(body, status=status)


def success_list(items, status=http_status.HTTP_200_OK):
    return success(items, status=status, count=len(items))


class EnvelopeMixin:
    """
    Wraps the standard ModelViewSet actions in the success envelope.
    Lists are not paginated.
    """

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        return success_list(self.get_serializer(queryset, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        return success(self.get_serializer(self.get_object()).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return success(serializer.data, status=http_status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return success(serializer.data)

    def destroy(self, request, *args, **kwargs):
        self.perform_destroy(self.get_object())
        return success({})
