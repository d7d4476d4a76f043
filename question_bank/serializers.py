from django.conf import settings
from rest_framework import serializers

from .models import Choice, Question, Subject, Topic
from .helpers.refinement import ROLES


class SubjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subject
        fields = ['id', 'name']


class TopicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Topic
        fields = ['id', 'name', 'subject', 'parent_topic']


class ChoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Choice
        fields = ['id', 'label', 'content', 'image_path', 'is_correct', 'position']
        read_only_fields = fields


class QuestionSerializer(serializers.ModelSerializer):
    """Hydrated question with its choices in display order."""
    choices = ChoiceSerializer(many=True, read_only=True)
    subject_name = serializers.SerializerMethodField()
    topic_name = serializers.SerializerMethodField()

    class Meta:
        model = Question
        fields = [
            'id', 'stem', 'stem_image_path', 'type', 'difficulty',
            'source', 'institution', 'board', 'role', 'year', 'explanation',
            'subject', 'subject_name', 'topic', 'topic_name',
            'created_at', 'choices',
        ]
        read_only_fields = fields

    def get_subject_name(self, obj):
        return obj.subject.name if obj.subject_id else None

    def get_topic_name(self, obj):
        return obj.topic.name if obj.topic_id else None


class FacetsSerializer(serializers.Serializer):
    board = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    institution = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    role = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    period = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    subject = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


class RetrieveQuestionsSerializer(serializers.Serializer):
    query = serializers.CharField(trim_whitespace=True)
    limit = serializers.IntegerField(required=False, min_value=1)
    facets = FacetsSerializer(required=False, allow_null=True)

    def validate_limit(self, value):
        max_limit = settings.QUESTION_SEARCH_MAX_LIMIT
        if value > max_limit:
            raise serializers.ValidationError(f"limit deve ser no máximo {max_limit}")
        return value


class GenerateQuestionsSerializer(serializers.Serializer):
    query = serializers.CharField(trim_whitespace=True)
    facets = FacetsSerializer(required=False, allow_null=True)


class MessageSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES)
    content = serializers.CharField(trim_whitespace=True)


class RefineSearchSerializer(serializers.Serializer):
    messages = MessageSerializer(many=True, required=False)
    topic = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    skip = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if not attrs.get('skip') and not attrs.get('messages') and not attrs.get('topic'):
            raise serializers.ValidationError("Messages array é obrigatória")
        return attrs
