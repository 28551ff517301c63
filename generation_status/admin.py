from django.contrib import admin
from .models import ContentFile, CreditAccount, CreditTransaction, Pipeline


@admin.register(ContentFile)
class ContentFileAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'file_type', 'generation_status', 'progress', 'updated_at')
    list_filter = ('generation_status', 'file_type', 'created_at')
    search_fields = ('id', 'name', 'user_id')


@admin.register(Pipeline)
class PipelineAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'pipeline_type', 'status', 'progress', 'updated_at')
    list_filter = ('status', 'pipeline_type', 'created_at')
    search_fields = ('id', 'name', 'user_id')


@admin.register(CreditAccount)
class CreditAccountAdmin(admin.ModelAdmin):
    list_display = ('user_id', 'credits', 'updated_at')
    search_fields = ('user_id',)


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ('user_id', 'amount', 'transaction_type', 'created_at')
    list_filter = ('transaction_type',)
    search_fields = ('user_id', 'description')
