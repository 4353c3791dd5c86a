# ==========================================
# apps/imports/models.py
# ==========================================

from django.db import models


class ImportStatus(models.TextChoices):
    PENDING = 'oczekuje', 'Pending'
    IMPORTED = 'zaimportowano', 'Imported'
    ERROR = 'blad', 'Error'


class ImportRowBase(models.Model):
    """
    Staging row of a legacy spreadsheet.

    Columns keep the spreadsheet's Polish headers and stay raw text;
    parsing happens during the import run.
    """

    id = models.BigAutoField(primary_key=True)
    status_importu = models.CharField(
        max_length=15,
        choices=ImportStatus.choices,
        default=ImportStatus.PENDING,
        db_index=True
    )
    blad_opis = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['id']

    def mark_imported(self):
        self.status_importu = ImportStatus.IMPORTED
        self.blad_opis = ''
        self.save(update_fields=['status_importu', 'blad_opis'])

    def mark_error(self, message):
        self.status_importu = ImportStatus.ERROR
        self.blad_opis = message
        self.save(update_fields=['status_importu', 'blad_opis'])


class ChildImportRow(ImportRowBase):
    """One child with the parent's contact data."""

    id_dziecka_csv = models.CharField(max_length=50, blank=True)
    nazwisko_dziecka = models.CharField(max_length=100, blank=True)
    imie_dziecka = models.CharField(max_length=100, blank=True)
    data_urodzenia = models.CharField(max_length=20, blank=True)
    mail_1 = models.CharField(max_length=255, blank=True)
    mail_2 = models.CharField(max_length=255, blank=True)
    telefon_1 = models.CharField(max_length=50, blank=True)
    telefon_2 = models.CharField(max_length=50, blank=True)
    sekcja = models.CharField(max_length=200, blank=True)

    class Meta(ImportRowBase.Meta):
        db_table = 'import_buffer'

    def __str__(self):
        return f"{self.imie_dziecka} {self.nazwisko_dziecka} ({self.status_importu})".strip()

    @property
    def child_name(self):
        return f"{self.imie_dziecka} {self.nazwisko_dziecka}".strip()


class TripImportRow(ImportRowBase):
    """One trip with up to two installments and season-pass rules."""

    tytul_wyjazdu = models.CharField(max_length=200, blank=True)
    opis = models.TextField(blank=True)
    sekcja = models.CharField(max_length=200, blank=True)
    info = models.TextField(blank=True)
    data_wyjazdu = models.CharField(max_length=20, blank=True)
    miejsce_wyjazdu = models.CharField(max_length=200, blank=True)
    godzina_wyjazdu = models.CharField(max_length=10, blank=True)
    data_powrotu = models.CharField(max_length=20, blank=True)
    miejsce_powrotu = models.CharField(max_length=200, blank=True)
    godzina_powrotu = models.CharField(max_length=10, blank=True)
    forma_platnosci_1 = models.CharField(max_length=50, blank=True)
    kwota_1 = models.CharField(max_length=20, blank=True)
    termin_1 = models.CharField(max_length=20, blank=True)
    forma_platnosci_2 = models.CharField(max_length=50, blank=True)
    kwota_2 = models.CharField(max_length=20, blank=True)
    termin_2 = models.CharField(max_length=20, blank=True)
    karnety_reguly = models.TextField(blank=True)
    forma_platnosci_karnet = models.CharField(max_length=50, blank=True)

    class Meta(ImportRowBase.Meta):
        db_table = 'trips_import_buffer'

    def __str__(self):
        return f"{self.tytul_wyjazdu or '(no title)'} ({self.status_importu})"
