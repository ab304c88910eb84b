from rest_framework import serializers

from records.serializers.patients import ContactDataSerializer, PersonalDataSerializer


class MdSettingsSerializer(serializers.Serializer):
    medicalSpecialty = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    nationalLicenseNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    stateLicense = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    stateLicenseNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    isMedicOfTheYear = serializers.BooleanField(required=False)
    encounterDuration = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=480)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for day in ('sunday', 'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday'):
            self.fields[f'{day}Start'] = serializers.TimeField(required=False, allow_null=True)
            self.fields[f'{day}End'] = serializers.TimeField(required=False, allow_null=True)


class UserWriteSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)
    roleId = serializers.CharField(required=False, max_length=64)
    additionalRoleIds = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    isActive = serializers.BooleanField(required=False)
    personalData = PersonalDataSerializer(required=False)
    contactData = ContactDataSerializer(required=False)
    mdSettings = MdSettingsSerializer(required=False)

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('username is required')
        return v

    def validate_password(self, v):
        if v and len(v) < 8:
            raise serializers.ValidationError('password must be at least 8 characters')
        return v
