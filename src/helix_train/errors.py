"""Exception types for helix-train."""


class HelixTrainError(Exception):
    """Base class for all helix-train errors."""


class NotFound(HelixTrainError):
    """A requested entity does not exist."""

    def __init__(self, entity: str, entity_id: str | int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationError(HelixTrainError):
    """Malformed input rejected at construction time."""


class InvalidUnit(ValidationError):
    """A duration unit outside of s/min/hr."""

    def __init__(self, unit):
        self.unit = unit
        super().__init__(f"Invalid duration unit: {unit!r}")


class DanglingTemplateReference(HelixTrainError):
    """An instance points at a template entity that no longer exists.

    Display paths catch this and fall back to the instance's own copy of
    the template fields.
    """

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} template {entity_id} no longer exists")


class InstanceCompleted(HelixTrainError):
    """A finished workout instance cannot be modified."""

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        super().__init__(f"Workout instance {instance_id} is already completed")
