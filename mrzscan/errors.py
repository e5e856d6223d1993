"""
Error types raised by the scanning core.

Structural failures raise one of these; field-level problems (an
unreadable date, say) degrade to empty strings instead.
"""


class ScanError(Exception):
	"""Base exception for scan errors"""
	def __init__(self, message, error_code, details=None):
		self.message = message
		self.error_code = error_code
		self.details = details or {}
		super().__init__(self.message)

	def to_dict(self):
		"""Convert error to JSON-serializable dict"""
		return {
			"success": False,
			"error": self.message,
			"error_code": self.error_code,
			"details": self.details
		}


class MrzFormatError(ScanError):
	"""MRZ text does not match a known layout, or the document number is empty"""
	def __init__(self, message, details=None):
		super().__init__(
			message=message,
			error_code="MRZ_FORMAT",
			details=details
		)


class MrzNotFoundError(ScanError):
	"""No MRZ found in the image"""
	def __init__(self, reason=None):
		super().__init__(
			message="No MRZ data found in the image",
			error_code="MRZ_NOT_FOUND",
			details={
				"reason": reason,
				"suggestion": "Ensure the MRZ area is clearly visible and in focus"
			}
		)


class IncompleteDataError(ScanError):
	"""Upstream response carried fewer fields than required"""
	def __init__(self, expected, found):
		super().__init__(
			message=f"Expected {expected} fields in response, found {found}",
			error_code="INCOMPLETE_DATA",
			details={"expected": expected, "found": found}
		)


class UnparsableResponseError(ScanError):
	"""No JSON or CSV structure could be located in the response"""
	def __init__(self, reason, excerpt=""):
		super().__init__(
			message=f"Could not parse the structured data from the response: {reason}",
			error_code="UNPARSABLE_RESPONSE",
			details={"excerpt": excerpt[:200]}
		)


class InvalidImageError(ScanError):
	"""Uploaded bytes are not a decodable image"""
	def __init__(self):
		super().__init__(
			message="Could not decode image from uploaded file",
			error_code="INVALID_IMAGE",
			details={"suggestion": "Upload a JPEG or PNG photo of the document"}
		)
