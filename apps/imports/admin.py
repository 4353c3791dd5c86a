# ==========================================
# apps/imports/admin.py
# ==========================================

from django.contrib import admin

from .models import ChildImportRow, TripImportRow, ImportStatus


class ImportRowAdmin(admin.ModelAdmin):
    list_filter = ['status_importu']
    readonly_fields = ['created_at']
    actions = ['reset_to_pending']

    def reset_to_pending(self, request, queryset):
        updated = queryset.update(status_importu=ImportStatus.PENDING, blad_opis='')
        self.message_user(request, f'{updated} row(s) returned to pending.')
    reset_to_pending.short_description = 'Return selected rows to pending'


@admin.register(ChildImportRow)
class ChildImportRowAdmin(ImportRowAdmin):
    """Admin interface for the children staging table."""

    list_display = ['id', 'imie_dziecka', 'nazwisko_dziecka', 'mail_1', 'sekcja', 'status_importu', 'blad_opis']
    search_fields = ['imie_dziecka', 'nazwisko_dziecka', 'mail_1', 'id_dziecka_csv']


@admin.register(TripImportRow)
class TripImportRowAdmin(ImportRowAdmin):
    """Admin interface for the trips staging table."""

    list_display = ['id', 'tytul_wyjazdu', 'sekcja', 'data_wyjazdu', 'data_powrotu', 'status_importu', 'blad_opis']
    search_fields = ['tytul_wyjazdu', 'sekcja']
