import asyncio, logging, socket

from .errors import SinkClosed

logger = logging.getLogger(__name__)

class MasterSocket:

	"""
	Connected UDP socket driven by the running event loop

	One query at a time: the protocol cannot tell two overlapping sessions apart
	on a single connected socket.
	"""

	def __init__(self, sock = None):
		if sock is None:
			sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
		self.socket = sock
		self.socket.setblocking(False)

	def __enter__(self):
		return self

	def __exit__(self, *exc):
		self.close()

	async def connect(self, host, port):
		loop = asyncio.get_running_loop()
		await loop.sock_connect(self.socket, (host, int(port)))
		logger.debug("Connected to %s:%s", host, port)

	async def send(self, data):
		loop = asyncio.get_running_loop()
		await loop.sock_sendall(self.socket, data)

	async def recv_into(self, buffer):
		loop = asyncio.get_running_loop()
		return await loop.sock_recv_into(self.socket, buffer)

	def close(self):
		self.socket.close()

class ServerChannel:

	"""
	Bounded, ordered channel of (Address, port) pairs

	put() waits while the channel is full. Once the consumer calls close(), any
	pending or later put() raises SinkClosed.
	"""

	def __init__(self, maxsize = 256):
		self.queue	= asyncio.Queue(maxsize)
		self.closed	= False

	def qsize(self):
		return self.queue.qsize()

	async def put(self, server):
		if self.closed:
			raise SinkClosed("Server channel is closed")
		await self.queue.put(server)
		if self.closed:
			self._drain()
			raise SinkClosed("Server channel closed during delivery")

	async def get(self):
		return await self.queue.get()

	def close(self):
		self.closed = True
		# Emptying the queue wakes any producer blocked in put().
		self._drain()

	def _drain(self):
		while not self.queue.empty():
			self.queue.get_nowait()
