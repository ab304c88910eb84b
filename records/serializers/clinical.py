import bleach
from rest_framework import serializers

from records.services.time_off import TYPES


class EncounterWriteSerializer(serializers.Serializer):
    medicId = serializers.CharField(required=False)
    patientId = serializers.CharField()
    date = serializers.DateTimeField()
    data = serializers.JSONField()


class AppointmentWriteSerializer(serializers.Serializer):
    medicId = serializers.CharField()
    patientId = serializers.CharField()
    startDate = serializers.DateTimeField()
    extra = serializers.BooleanField(required=False, default=False)


class AppointmentListQuerySerializer(serializers.Serializer):
    medicId = serializers.CharField(required=False)
    patientId = serializers.CharField(required=False)
    # "from" is a keyword; mapped in __init__
    to = serializers.DateTimeField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['from'] = serializers.DateTimeField(required=False)


class StudyResultSerializer(serializers.Serializer):
    type = serializers.CharField(max_length=64)
    data = serializers.JSONField(required=False)


class StudyWriteSerializer(serializers.Serializer):
    date = serializers.DateTimeField()
    protocol = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    studies = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    noOrder = serializers.BooleanField(required=False, default=False)
    medicId = serializers.CharField(required=False, allow_null=True)
    referringDoctor = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    patientId = serializers.CharField()
    results = StudyResultSerializer(many=True, required=False)

    def validate_referringDoctor(self, v):
        if v is None:
            return None
        return bleach.clean(v.strip(), tags=[], strip=True) or None


class TimeOffWriteSerializer(serializers.Serializer):
    medicId = serializers.CharField(required=False)
    startDate = serializers.CharField()
    endDate = serializers.CharField()
    type = serializers.ChoiceField(choices=TYPES)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_notes(self, v):
        if v is None:
            return None
        return bleach.clean(v.strip(), tags=[], strip=True)
