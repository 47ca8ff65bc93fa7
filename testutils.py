#
# Things we use in so many tests we might as well put them in one place:
# fake sockets, fake lookups, and a real server on a loopback port.
import threading
import socket

import identerr
import identd
import proc

class FakeSocket:
	"""Enough of a connected socket for session handling.

	recvR is a list of chunks handed back one per recv(); once they
	run out we return EOF, or raise recvR[-1] if it is an exception."""
	def __init__(self, recvR, peer = ('::ffff:127.0.0.1', 5000, 0, 0)):
		self.recvR = list(recvR)
		self.peer = peer
		self.sent = b""
		self.closed = False
		self.timeout = None
	def getpeername(self):
		if isinstance(self.peer, Exception):
			raise self.peer
		return self.peer
	def settimeout(self, t):
		self.timeout = t
	def recv(self, n):
		assert not self.closed
		if not self.recvR:
			return b""
		r = self.recvR.pop(0)
		if isinstance(r, Exception):
			raise r
		assert len(r) <= n
		return r
	def sendall(self, data):
		assert not self.closed
		self.sent += data
	def close(self):
		self.closed = True

class CannedLookup:
	"""A lookup that returns fixed output and remembers what it was
	asked for."""
	def __init__(self, output = b""):
		self.output = output
		self.calls = []
		self.lock = threading.Lock()
	def lookup(self, remote_port, remote_ip):
		with self.lock:
			self.calls.append((remote_port, remote_ip))
		return self.output

class FailingLookup:
	def __init__(self):
		self.calls = 0
	def lookup(self, remote_port, remote_ip):
		self.calls += 1
		raise identerr.LookupFailed("no lsof here")

class BrokenLookup:
	"""A lookup with a bug in it."""
	def lookup(self, remote_port, remote_ip):
		raise ValueError("lookup bug")

class PortLookup:
	"""Answer with one lsof record per remote port, the user being
	'user<remote port>' and the local port remote port + 1000."""
	def lookup(self, remote_port, remote_ip):
		return ("p1\nLuser%d\nf3\nn127.0.0.1:%d->127.0.0.1:%d\n" % \
			(remote_port, remote_port + 1000,
			 remote_port)).encode()

class LoopbackServer:
	"""A real identd listening on an ephemeral loopback port."""
	def __init__(self, lookupobj, maxthreads = 0, timeout = 5):
		self.sock = proc.getsocket('127.0.0.1', 0)
		self.port = self.sock.getsockname()[1]
		self.scfg = identd.ServeConf({'maxthreads': maxthreads,
					      'timeout': timeout}, lookupobj)
		self.stop = threading.Event()
		self.thread = threading.Thread(target = identd.serve,
					       args = ([self.sock], self.scfg,
						       self.stop),
					       daemon = True)
	def start(self):
		self.thread.start()
		return self
	def shutdown(self):
		self.stop.set()
		self.thread.join(5)
		proc.closesock(self.sock)
	def connect(self):
		return socket.create_connection(('127.0.0.1', self.port), 5)

def readall(sock):
	data = b""
	while 1:
		r = sock.recv(1024)
		if not r:
			return data
		data += r

class ReadlineError:
	"""A file that returns some lines and then fails."""
	def __init__(self, lines = None):
		self.lines = list(lines or [])
	def readline(self):
		if self.lines:
			return self.lines.pop(0)
		raise OSError("this is a test error")
