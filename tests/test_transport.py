import asyncio
import socket

import pytest

from msquery.errors import SinkClosed
from msquery.masters import REPLY_HEADER, Address, query
from msquery.regions import Region
from msquery.transport import MasterSocket, ServerChannel


@pytest.fixture
def directory():

	sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
	sock.bind(("127.0.0.1", 0))
	sock.settimeout(2)

	yield sock

	sock.close()


def test_master_socket_exchange(directory):

	async def exchange():
		with MasterSocket() as master:
			await master.connect(*directory.getsockname())
			await master.send(b"\x31\xFF0.0.0.0:0\x00\x00")
			request, peer = directory.recvfrom(2048)
			directory.sendto(b"reply", peer)
			buffer = bytearray(16)
			size = await master.recv_into(buffer)
			return request, bytes(buffer[:size])

	assert asyncio.run(exchange()) == (b"\x31\xFF0.0.0.0:0\x00\x00", b"reply")


def test_query_over_udp(directory):

	async def exchange():
		channel = ServerChannel()
		with MasterSocket() as master:
			await master.connect(*directory.getsockname())
			task = asyncio.ensure_future(query(master, Region.ALL, "", channel, delay=0))
			loop = asyncio.get_running_loop()
			request, peer = await loop.run_in_executor(None, directory.recvfrom, 2048)
			directory.sendto(REPLY_HEADER + b"\x7F\x00\x00\x01\x69\x87" + b"\x00" * 6, peer)
			count = await task
		return request, count, await channel.get()

	request, count, server = asyncio.run(exchange())

	assert request == b"\x31\xFF0.0.0.0:0\x00\x00"
	assert count == 1
	assert server == (Address(127, 0, 0, 1), 27015)


def test_channel_closed_before_put():

	async def put():
		channel = ServerChannel()
		channel.close()
		await channel.put((Address(1, 2, 3, 4), 26))

	with pytest.raises(SinkClosed):
		asyncio.run(put())


def test_channel_close_wakes_blocked_producer():

	async def put():
		channel = ServerChannel(maxsize=1)
		await channel.put((Address(1, 2, 3, 4), 26))
		blocked = asyncio.ensure_future(channel.put((Address(5, 6, 7, 8), 27)))
		await asyncio.sleep(0)
		assert not blocked.done()
		channel.close()
		with pytest.raises(SinkClosed):
			await blocked
		assert channel.qsize() == 0
		return channel.closed

	assert asyncio.run(put()) is True
