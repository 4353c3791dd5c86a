from rest_framework import serializers

from .models import ChildImportRow, TripImportRow, ImportStatus


# =============================================================================
# Input Serializers
# =============================================================================

class CSVUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        if value.size > 5 * 1024 * 1024:
            raise serializers.ValidationError("File too large (max 5 MB)")
        return value


class ImportRowFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ImportStatus.choices, required=False)


class TripsImportResetSerializer(serializers.Serializer):
    row_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False, default=list)


# =============================================================================
# Output Serializers
# =============================================================================

class ChildImportRowSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChildImportRow
        exclude = ['created_at']


class TripImportRowSerializer(serializers.ModelSerializer):
    class Meta:
        model = TripImportRow
        exclude = ['created_at']


class ImportStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    oczekuje = serializers.IntegerField()
    zaimportowano = serializers.IntegerField()
    blad = serializers.IntegerField()


class StageResultSerializer(serializers.Serializer):
    created = serializers.IntegerField()
    ignored_columns = serializers.ListField(child=serializers.CharField())


class ChildImportDetailSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    status = serializers.CharField()
    error = serializers.CharField(required=False)


class ChildrenImportResultSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    imported = serializers.IntegerField()
    errors = serializers.IntegerField()
    skipped = serializers.IntegerField()
    new_parents = serializers.IntegerField()
    new_groups = serializers.IntegerField()
    details = ChildImportDetailSerializer(many=True)


class TripsImportResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    imported = serializers.IntegerField()
    errors = serializers.IntegerField()
    error_details = serializers.ListField(child=serializers.CharField())


class ContactFixResultSerializer(serializers.Serializer):
    fixed = serializers.IntegerField()
    errors = serializers.IntegerField()
