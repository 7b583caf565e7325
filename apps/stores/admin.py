from django.contrib import admin
from django.core.exceptions import ValidationError
from django import forms

from .models import Store
from .services.exceptions import InvalidScheduleError
from .services.store_hours import validate_schedule, get_store_status
from .services.store_management import _check_timezone


class StoreAdminForm(forms.ModelForm):
    """Validate the weekly schedule the same way the API does."""

    class Meta:
        model = Store
        fields = '__all__'

    def clean_hours(self):
        hours = self.cleaned_data.get('hours')
        result = validate_schedule(hours)
        if not result.is_valid:
            raise ValidationError([f'{day}: {message}' for day, message in result.errors.items()])
        return hours

    def clean_timezone(self):
        name = self.cleaned_data.get('timezone')
        try:
            _check_timezone(name)
        except InvalidScheduleError as e:
            raise ValidationError(str(e))
        return name


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    form = StoreAdminForm
    list_display = ['name', 'owner', 'timezone', 'is_active', 'open_now', 'created_at']
    list_filter = ['is_active', 'timezone']
    search_fields = ['name', 'address', 'owner__email']
    raw_id_fields = ['owner']
    readonly_fields = ['created_at', 'updated_at']

    def open_now(self, obj):
        return get_store_status(obj).display_text
    open_now.short_description = 'Now'
