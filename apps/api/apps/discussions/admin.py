from django.contrib import admin
from .models import CaseDiscussion, ParentChatMessage


@admin.register(CaseDiscussion)
class CaseDiscussionAdmin(admin.ModelAdmin):
    list_display = ['id', 'patient', 'user_id', 'created_at']
    list_filter = ['created_at']
    readonly_fields = ['created_at']


@admin.register(ParentChatMessage)
class ParentChatMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'patient', 'sender_id', 'created_at']
    list_filter = ['created_at']
    readonly_fields = ['created_at']
