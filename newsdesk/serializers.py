"""newsdesk.serializers - request validation for the /api/ workflow endpoints."""

from rest_framework import serializers

from newsdesk.workflow import EDITORS

SECTIONS = ("Upset", "Hype", "Festivals", "None")


class DraftSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=300)
    slug = serializers.SlugField(max_length=200, required=False, allow_blank=True)
    excerpt = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField(required=False, allow_blank=True)
    featured_image = serializers.URLField(required=False, allow_null=True, allow_blank=True)
    section = serializers.ChoiceField(choices=SECTIONS, required=False, allow_null=True)
    artist_names = serializers.ListField(
        child=serializers.CharField(max_length=120), required=False, allow_null=True, max_length=20
    )
    status = serializers.ChoiceField(choices=("draft", "in_review"), required=False, default="draft")
    story_id = serializers.CharField(required=False, allow_null=True)

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title may not be blank.")
        return value


class AttentionSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=1000)


class ImageUploadSerializer(serializers.Serializer):
    file = serializers.FileField(allow_empty_file=False)

    def validate_file(self, value):
        content_type = getattr(value, "content_type", "") or ""
        if not content_type.startswith("image/"):
            raise serializers.ValidationError("Only image uploads are accepted.")
        return value


class EditorSerializer(serializers.Serializer):
    """The acting editor, taken from the X-Editor header."""

    editor = serializers.ChoiceField(choices=EDITORS)
