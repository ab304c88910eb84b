from rest_framework import serializers

from records.serializers.patients import ContactDataSerializer, PersonalDataSerializer

PROFILE_ACTIONS = ('setup-2fa', 'enable-2fa', 'change-password', 'update-profile')


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()
    twoFactorCode = serializers.CharField(required=False, allow_blank=True)

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('password is required')
        return v


class ProfileActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=PROFILE_ACTIONS)
    twoFactorCode = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    currentPassword = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    newPassword = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    personalData = PersonalDataSerializer(required=False)
    contactData = ContactDataSerializer(required=False)
