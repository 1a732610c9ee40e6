"""Engine error taxonomy.

The classes subclass the builtin exception the HTTP layer already maps
(``ValueError`` → 400, ``LookupError`` → 404) so routes keep a single
``_map_error`` helper.
"""

from __future__ import annotations


class FieldSenseError(Exception):
	"""Root of all engine errors."""


class ValidationError(FieldSenseError, ValueError):
	"""Input the caller must correct: unknown texture or crop, unconfirmed crop."""


class SensorDataError(ValidationError):
	"""A calibrated sensor value falls outside its physically valid range."""


class NotFoundError(FieldSenseError, LookupError):
	def __init__(self, resource: str, identifier: object):
		self.resource = resource
		self.identifier = identifier
		super().__init__(f"{resource} with identifier '{identifier}' not found")


class ExternalServiceError(FieldSenseError, RuntimeError):
	def __init__(self, service: str, message: str):
		self.service = service
		super().__init__(f"{service}: {message}")


class DatabaseError(FieldSenseError, RuntimeError):
	def __init__(self, operation: str, message: str):
		self.operation = operation
		super().__init__(f"database operation '{operation}' failed: {message}")
