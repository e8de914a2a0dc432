import struct

from .errors import UnexpectedEof

ENCODING = "utf-8"

def encode_cstring(text):
	return text.encode(ENCODING) + b"\x00"

class DataReader:
	def __init__(self, data):
		self.data = bytes(data)

	def __len__(self):
		return len(self.data)

	def read(self, format, byteorder = "<"):
		size = struct.calcsize(byteorder + format)
		if len(self.data) < size:
			raise UnexpectedEof("Need %d bytes for %r, %d left" % (size, format, len(self.data)))
		value = struct.unpack(byteorder + format, self.data[0:size])
		self.data = self.data[size:]
		return value

	def readto(self, byte, count = None):
		value = tuple()
		values = 1
		if count is not None:
			values = count
		for x in range(values):
			index = self.data.find(bytes((byte,)))
			if index == -1:
				index = len(self.data)
			value += (self.data[0:index],)
			self.data = self.data[index+1:]
		if count is None:
			value = value[0]
		return value

	def match(self, expected):
		# Always consumes len(expected), whether or not the bytes match.
		size = len(expected)
		if len(self.data) < size:
			raise UnexpectedEof("Need %d bytes to match, %d left" % (size, len(self.data)))
		value = self.data[0:size]
		self.data = self.data[size:]
		return value == bytes(expected)
