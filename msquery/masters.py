import asyncio, logging, socket, time
from collections import namedtuple

from . import DataReader, encode_cstring
from .errors import (HeaderMismatch, InvalidCode, MalformedResponse,
	PageLimitExceeded, SinkClosed, TransportError, UnexpectedEof)
from .regions import Region

logger = logging.getLogger(__name__)

MASTER_SERVERS = {
	"source":	("hl2master.steampowered.com", 27011),
	"goldsrc":	("hl1master.steampowered.com", 27010),
}

REQUEST_SERVERS		= 0x31
REPLY_HEADER		= b"\xFF\xFF\xFF\xFF\x66\x0A"
ENTRY_SIZE			= 6

DEFAULT_DELAY		= 6
DEFAULT_BUFFER_SIZE	= 2048

_SINK_CLOSED = (SinkClosed,)
if hasattr(asyncio, "QueueShutDown"):
	_SINK_CLOSED += (asyncio.QueueShutDown,)

class Address(namedtuple("Address", "a b c d")):
	__slots__ = ()

	def __str__(self):
		return "%d.%d.%d.%d" % self

EMPTY_ADDRESS = Address(0, 0, 0, 0)

def _region_code(region):
	if isinstance(region, Region):
		return region.to_byte()
	if isinstance(region, bool) or not isinstance(region, int) or not 0 <= region <= 0xFF:
		raise InvalidCode("Invalid region code: %r" % (region,))
	return region

def build_request(region_code, filter_text, address = EMPTY_ADDRESS, port = 0):
	return (bytes((REQUEST_SERVERS, region_code))
		+ encode_cstring("%s:%d" % (address, port))
		+ encode_cstring(filter_text))

class Page:

	"""
	One response datagram

	Iterating yields (Address, port) pairs until the all-zero terminator, which
	sets complete, or until less than a whole entry is left.
	"""

	def __init__(self, data):
		self.reader		= DataReader(data)
		self.complete	= False

		head = self.reader.data[0:len(REPLY_HEADER)]
		if head != REPLY_HEADER[0:len(head)]:
			logger.warning("Bad reply header: %r", head)
			raise HeaderMismatch("Mismatched starting sequence")
		try:
			self.reader.match(REPLY_HEADER)
		except UnexpectedEof:
			logger.warning("Reply shorter than its header: %r", head)
			raise

	def __iter__(self):
		reader = self.reader
		while len(reader) >= ENTRY_SIZE:
			address = Address(*reader.read("BBBB"))
			port = reader.read("H", "!")[0]
			if address == EMPTY_ADDRESS:
				self.complete = True
				return
			yield address, port

async def query(transport, region, filter_text, sink, delay = DEFAULT_DELAY,
		max_pages = None, buffer_size = DEFAULT_BUFFER_SIZE):
	"""
	Ask the master server behind transport for every server matching
	filter_text and put each (Address, port) pair into sink.

	transport needs awaitable send(data) and recv_into(buffer); sink needs an
	awaitable put(server). Pages are requested delay seconds apart until one
	ends with the terminator. Returns the number of servers delivered.
	"""
	region_code = _region_code(region)
	cursor = (EMPTY_ADDRESS, 0)
	buffer = bytearray(buffer_size + 1)
	pages = 0
	count = 0

	while True:
		if max_pages is not None and pages >= max_pages:
			logger.warning("No terminator after %d pages, giving up", pages)
			raise PageLimitExceeded("No end of list after %d pages" % pages)

		pages += 1
		logger.debug("Requesting page %d from %s:%d", pages, *cursor)
		try:
			await transport.send(build_request(region_code, filter_text, *cursor))
			length = await transport.recv_into(buffer)
		except OSError as exc:
			logger.warning("Transport failed on page %d: %s", pages, exc)
			raise TransportError(str(exc)) from exc

		if length > buffer_size:
			logger.warning("Datagram exceeds %d byte receive buffer", buffer_size)
			raise MalformedResponse("Datagram larger than %d bytes" % buffer_size)

		page = Page(buffer[:length])

		for server in page:
			try:
				await sink.put(server)
			except _SINK_CLOSED as exc:
				raise SinkClosed("Result sink closed after %d servers" % count) from exc
			cursor = server
			count += 1

		logger.debug("Page %d done, %d servers so far, complete=%s", pages, count, page.complete)
		if page.complete:
			return count

		await asyncio.sleep(delay)

class hl2(object):

	"""
	Half-Life 2 / Source Master Server (blocking)

	Filters are passed as raw filter text, ex. \\appid\\240\\map\\de_dust2
	----------------------------------------------------------------------------
	type		Server Type
				d	Dedicated
				l	Listening
	secure		Servers Using Anti-Cheat Technology (VAC)
	gamedir		Servers Running The Specified Modification (ex. cstrike)
	map			Servers Running The Specified Map (ex. cs_italy)
	linux		Servers Running On A Linux Platform
	empty		Servers That Are Not Empty
	full		Servers That Are Not Full
	proxy		Servers That Are Spectator Proxies
	"""

	timeout		= 2
	delay		= DEFAULT_DELAY
	max_pages	= None
	buffer_size	= DEFAULT_BUFFER_SIZE

	OPTIONS		= ("timeout", "delay", "max_pages", "buffer_size")

	def __init__(self, host, port, **options):
		self.host		= (host, int(port))
		self.socket		= socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

		for name, value in options.items():
			if name not in self.OPTIONS:
				raise TypeError("Unknown option %r" % name)
			setattr(self, name, value)

	def close(self):
		self.socket.close()

	def send(self, data):
		self.socket.send(data)

	def recv(self):
		data = self.socket.recv(self.buffer_size + 1)
		if len(data) > self.buffer_size:
			logger.warning("Datagram exceeds %d byte receive buffer", self.buffer_size)
			raise MalformedResponse("Datagram larger than %d bytes" % self.buffer_size)
		return data

	def request(self, callback, region = Region.ALL, filter_text = ""):
		"""
		Call callback((address, port)) for every listed server. Returning False
		from the callback ends the query early.
		"""
		region_code = _region_code(region)
		cursor = (EMPTY_ADDRESS, 0)
		pages = 0
		count = 0

		try:
			self.socket.settimeout(self.timeout)
			self.socket.connect(self.host)
			while True:
				if self.max_pages is not None and pages >= self.max_pages:
					logger.warning("No terminator after %d pages, giving up", pages)
					raise PageLimitExceeded("No end of list after %d pages" % pages)
				pages += 1
				logger.debug("Requesting page %d from %s:%d", pages, *cursor)
				self.send(build_request(region_code, filter_text, *cursor))
				page = Page(self.recv())
				for server in page:
					count += 1
					if callback(server) is False:
						return count
					cursor = server
				logger.debug("Page %d done, %d servers so far, complete=%s", pages, count, page.complete)
				if page.complete:
					return count
				time.sleep(self.delay)
		except OSError as exc:
			logger.warning("Transport failed on page %d: %s", pages, exc)
			raise TransportError(str(exc)) from exc
