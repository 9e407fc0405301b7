"""
Discipleship serializers.

Model serializers only shape output; every write goes through the services
in ``apps.discipleship.services``, fed by the small input serializers below.
"""
from rest_framework import serializers

from apps.core.constants import ProgressStatus
from .models import Plan, Stage, ProgressRecord


class StageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Stage
        fields = [
            'id', 'plan', 'name', 'description', 'order', 'estimated_days',
            'suggested_activities', 'key_verses', 'required_resources',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PlanSerializer(serializers.ModelSerializer):
    stage_count = serializers.ReadOnlyField()

    class Meta:
        model = Plan
        fields = [
            'id', 'leader', 'name', 'description', 'maturity_level',
            'estimated_days', 'is_active', 'stage_count', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PlanDetailSerializer(PlanSerializer):
    stages = serializers.SerializerMethodField()

    class Meta(PlanSerializer.Meta):
        fields = PlanSerializer.Meta.fields + ['stages']
        read_only_fields = fields

    def get_stages(self, obj):
        return StageSerializer(obj.stages.order_by('order', 'created_at'), many=True).data


class ProgressRecordSerializer(serializers.ModelSerializer):
    disciple_name = serializers.CharField(source='disciple.name', read_only=True)
    plan_name = serializers.CharField(source='plan.name', read_only=True)
    stage_name = serializers.CharField(source='stage.name', read_only=True)
    stage_order = serializers.IntegerField(source='stage.order', read_only=True)

    class Meta:
        model = ProgressRecord
        fields = [
            'id', 'leader', 'disciple', 'disciple_name', 'plan', 'plan_name',
            'stage', 'stage_name', 'stage_order', 'status', 'started_at',
            'completed_at', 'observations', 'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


# ─── Inputs ─────────────────────────────────────────────────────────────────
# Typed field checks; ownership and business rules live in the services.


class PlanInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_blank=True)
    maturity_level = serializers.CharField(required=False)
    estimated_days = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class StageInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    order = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    estimated_days = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    suggested_activities = serializers.CharField(required=False, allow_blank=True)
    key_verses = serializers.CharField(required=False, allow_blank=True)
    required_resources = serializers.CharField(required=False, allow_blank=True)


class AssignPlanSerializer(serializers.Serializer):
    disciple = serializers.UUIDField()


class VersionSerializer(serializers.Serializer):
    version = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class ObservationsSerializer(VersionSerializer):
    observations = serializers.CharField(allow_blank=True)


class StatusSerializer(VersionSerializer):
    status = serializers.ChoiceField(choices=ProgressStatus.CHOICES)


class RemovalRequestSerializer(serializers.Serializer):
    plan = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')
