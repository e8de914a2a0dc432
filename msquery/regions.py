import enum

from .errors import InvalidCode

class Region(enum.Enum):

	"""
	Master Server Region Codes

	----------------------------------------------------------------------------
	US_EAST			0x00 	US East coast
	US_WEST			0x01 	US West coast
	SOUTH_AMERICA	0x02 	South America
	EUROPE			0x03 	Europe
	ASIA			0x04 	Asia
	AUSTRALIA		0x05 	Australia
	MIDDLE_EAST		0x06 	Middle East
	AFRICA			0x07 	Africa
	ALL				0xFF 	Rest of the world
	"""

	US_EAST			= 0x00
	US_WEST			= 0x01
	SOUTH_AMERICA	= 0x02
	EUROPE			= 0x03
	ASIA			= 0x04
	AUSTRALIA		= 0x05
	MIDDLE_EAST		= 0x06
	AFRICA			= 0x07
	ALL				= 0xFF

	def to_byte(self):
		return self.value

	@classmethod
	def from_byte(cls, code):
		try:
			return cls(code)
		except ValueError:
			raise InvalidCode("Invalid region code: %r" % (code,)) from None

def to_byte(region):
	return region.to_byte()

def from_byte(code):
	return Region.from_byte(code)
