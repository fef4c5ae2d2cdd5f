from rest_framework import status
from rest_framework.response import Response

from newsdesk.serializers import AttentionSerializer, ImageUploadSerializer
from . import DeskView, acting_editor


class AttentionView(DeskView):
    """POST /api/notifications/attention/ {message} - ping the other editor on Telegram."""

    def post(self, request, *args, **kwargs):
        ser = AttentionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        sent = self.get_desk().request_attention(acting_editor(request), ser.validated_data["message"])
        return Response({"sent": sent}, status=status.HTTP_200_OK)


class ImageUploadView(DeskView):
    """POST /api/uploads/image/ (multipart "file") - Cloudinary upload."""

    def post(self, request, *args, **kwargs):
        ser = ImageUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        upload = ser.validated_data["file"]
        result = self.get_desk().upload_image(upload.read(), upload.name, upload.content_type)
        return Response(result, status=status.HTTP_201_CREATED)
