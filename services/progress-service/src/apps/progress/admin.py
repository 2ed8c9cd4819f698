from django.contrib import admin
from .models import StudentProgress, SkillHistoryEntry, Lesson, LessonStudent, LessonFeedback, AchievementUnlock


class EngineOwnedAdmin(admin.ModelAdmin):
    """View-only admin for rows written by the evaluation engine."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StudentProgress)
class StudentProgressAdmin(EngineOwnedAdmin):
    list_display = ['student_id', 'overall_level', 'completed_lessons', 'streak_days', 'total_points', 'last_updated']
    list_filter = ['overall_level']
    search_fields = ['student_id']


@admin.register(SkillHistoryEntry)
class SkillHistoryEntryAdmin(EngineOwnedAdmin):
    list_display = ['student_id', 'sport', 'level_before', 'level_after', 'progress_percent', 'recorded_at']
    list_filter = ['sport']


class LessonStudentInline(admin.TabularInline):
    model = LessonStudent
    extra = 0


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ['title', 'date', 'status', 'skill_level', 'instructor_id']
    list_filter = ['status', 'skill_level']
    inlines = [LessonStudentInline]


@admin.register(LessonFeedback)
class LessonFeedbackAdmin(admin.ModelAdmin):
    list_display = ['student_id', 'lesson', 'date', 'sport', 'overall', 'current_level']
    list_filter = ['sport', 'current_level']


@admin.register(AchievementUnlock)
class AchievementUnlockAdmin(EngineOwnedAdmin):
    list_display = ['student_id', 'definition_name', 'category', 'rarity', 'points', 'unlocked_at']
    list_filter = ['category', 'rarity']
    search_fields = ['student_id', 'definition_name']
