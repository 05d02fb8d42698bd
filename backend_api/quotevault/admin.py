from django.contrib import admin

from .models import ActivityRecord, Franchise, Question


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    fields = ("kind", "media_path", "answer", "stop_time", "base_clarity")


@admin.register(Franchise)
class FranchiseAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "created_at")
    list_filter = ("category",)
    search_fields = ("title",)
    inlines = [QuestionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "franchise", "kind", "answer", "base_clarity", "media_path")
    list_filter = ("kind", "franchise__category")
    search_fields = ("answer", "franchise__title")
    ordering = ("franchise", "kind", "id")


@admin.register(ActivityRecord)
class ActivityRecordAdmin(admin.ModelAdmin):
    list_display = ("question", "user", "attempts", "hints_used", "time_taken", "created_at")
    list_filter = ("question__kind",)
    search_fields = ("question__answer", "user__username")
    readonly_fields = ("created_at", "updated_at")
