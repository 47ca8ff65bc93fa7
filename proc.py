#
# The gory low-level Unix bits: listening sockets, accepting
# connections, signals, and closing sockets without fuss.

import ipaddress
import select
import signal
import socket

class Kaboom(Exception):
	pass

# How many pending connections the kernel may queue for us. Large is
# better than small.
BACKLOG = 100

def _family(h):
	if not h:
		return socket.AF_INET6
	try:
		ip = ipaddress.ip_address(h)
	except ValueError:
		raise Kaboom("not an IP address: %s" % (h,))
	if ip.version == 4:
		return socket.AF_INET
	return socket.AF_INET6

# Open up a listening socket. An IPv6 socket (including the default,
# '::') accepts IPv4 clients too; they appear as IPv4-mapped addresses.
def getsocket(h, p):
	fam = _family(h)
	if not h:
		h = "::"
	sock = None
	try:
		sock = socket.socket(fam, socket.SOCK_STREAM)
		sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		if fam == socket.AF_INET6:
			sock.setsockopt(socket.IPPROTO_IPV6,
					socket.IPV6_V6ONLY, 0)
		# Python sockets are already close-on-exec, so lsof does
		# not inherit this.
		sock.bind((h, int(p)))
		sock.setblocking(False)
		sock.listen(BACKLOG)
	except OSError as e:
		if sock is not None:
			closesock(sock)
		raise Kaboom(e.strerror or str(e))
	return sock

# Set up the signal handler for status reports. The upper level does
# not care about signal arguments.
def initsignals(usr1func):
	def usr1(n, f):
		usr1func()
	signal.signal(signal.SIGUSR1, usr1)

# Wait for and accept new connections on any of the listening sockets.
# Returns the list of new sockets, which may be empty if we time out
# or all the connections evaporated before we got to them. Accept
# errors are handed to errfunc, if given, and otherwise ignored.
def nextconnection(sockl, timeout = None, errfunc = None):
	rl = select.select(sockl, [], [], timeout)[0]
	nsocks = []
	for rsock in rl:
		# Drain everything pending on this socket; accept()
		# raises once there is nothing left.
		while 1:
			try:
				nsock, addr = rsock.accept()
			except BlockingIOError:
				break
			except OSError as e:
				# Clients can disconnect before we get
				# around to accepting them, and we can run
				# short of descriptors. Neither stops us.
				if errfunc:
					errfunc(e)
				break
			# Sessions do blocking IO with their own timeouts.
			nsock.setblocking(True)
			nsocks.append(nsock)
	return nsocks

# Carefully close a socket, ignoring errors; it may already be dead.
def closesock(sock):
	try:
		sock.close()
	except OSError:
		pass
