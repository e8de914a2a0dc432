class ProtocolError(Exception):

	"""
	Base class for every failure raised while talking to a master server
	"""

class TransportError(ProtocolError):
	pass

class HeaderMismatch(ProtocolError):
	pass

class UnexpectedEof(ProtocolError):
	pass

class MalformedResponse(ProtocolError):
	pass

class InvalidCode(ProtocolError, ValueError):
	pass

class SinkClosed(ProtocolError):
	pass

class PageLimitExceeded(ProtocolError):
	pass
