from django.contrib import admin
from django.core.exceptions import ValidationError
from django.forms.models import BaseInlineFormSet

from .models import Choice, Question, QuestionSearch, Subject, Topic


class ChoiceInlineFormSet(BaseInlineFormSet):
    def clean(self):
        super().clean()
        choices = [
            form.instance for form in self.forms
            if getattr(form, 'cleaned_data', None) and not form.cleaned_data.get('DELETE')
        ]
        problems = self.instance.choice_problems(choices=choices)
        if problems:
            raise ValidationError(problems)


class ChoiceInline(admin.TabularInline):
    model = Choice
    formset = ChoiceInlineFormSet
    extra = 0
    fields = ('position', 'label', 'content', 'is_correct', 'image_path')
    ordering = ('position',)


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['stem_preview', 'type', 'board', 'institution', 'role', 'year', 'difficulty', 'created_at']
    search_fields = ['stem', 'board', 'institution', 'role', 'source']
    list_filter = ['type', 'difficulty', 'board', 'year']
    inlines = [ChoiceInline]

    fieldsets = (
        ('Question Content', {
            'fields': ('stem', 'stem_image_path', 'type', 'difficulty', 'explanation')
        }),
        ('Provenance', {
            'fields': ('source', 'board', 'institution', 'role', 'year'),
        }),
        ('Classification', {
            'fields': ('subject', 'topic', 'owner'),
        }),
    )

    def stem_preview(self, obj):
        return obj.stem[:50] + '...' if len(obj.stem) > 50 else obj.stem
    stem_preview.short_description = 'Stem'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('subject', 'topic')


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)


@admin.register(Topic)
class TopicAdmin(admin.ModelAdmin):
    list_display = ('name', 'subject', 'parent_topic')
    list_filter = ('subject',)
    search_fields = ('name',)


@admin.register(QuestionSearch)
class QuestionSearchAdmin(admin.ModelAdmin):
    list_display = ('question', 'updated_at')
    readonly_fields = ('question', 'tsv', 'updated_at')
