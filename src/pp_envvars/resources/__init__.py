"""Remote record models for environment variables."""

from pp_envvars.resources.variables import DesiredState, VariableDefinition, VariableValue

__all__ = ["DesiredState", "VariableDefinition", "VariableValue"]
