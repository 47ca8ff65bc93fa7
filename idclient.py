#
# A Python implementation of the client end of the identd protocol.
# We use it to poke at identds, our own included, from the command
# line and from the tests.
#
# All operations take an optional timeout. Without one, a silent identd
# can hang us indefinitely.
#
# Returned (in general): either the identd return or 'None'.

import sys
import socket

import log

# some constants:
MAXSIZE = 1024		# no sane identd return will ever be over this size
IDENTD = 113		# identd/auth/etc TCP port

def request(host, query, wait = None, port = IDENTD, bindto = None):
	"""Send query to the identd on host and return its answer line.

	The answer has its line ending removed. None is returned if there
	is no (complete) answer. bindto is an optional local address to
	connect from."""
	srcaddr = None
	if bindto:
		srcaddr = (bindto, 0)
	try:
		s = socket.create_connection((host, port), wait, srcaddr)
	except OSError:
		return None
	l = b""
	try:
		s.sendall(("%s\r\n" % (query,)).encode("utf-8"))
		while len(l) < MAXSIZE:
			r = s.recv(MAXSIZE)
			# maybe we got an EOF.
			if not r:
				break
			l += r
			# we could insist on \r\n, but why?
			if b"\n" in l:
				break
	except OSError:
		return None
	finally:
		s.close()
	if b"\n" not in l:
		return None
	# chomp off short in case of a multi-line return.
	l = l[:l.find(b"\n")].rstrip(b"\r")
	return l.decode("utf-8", "replace")

def userid(answer):
	"""Return the user from a USERID answer line, or None."""
	if answer is None:
		return None
	fields = [x.strip() for x in answer.split(":", 3)]
	# does this look like a good identd return, with a user ID?
	if len(fields) != 4 or fields[1] != 'USERID':
		return None
	return fields[3]

def ident(rh, rp, lh, lp, wait = None, port = IDENTD):
	"""Perform the identd protocol and return the user, if any.

	Parameters: remote host, remote port, local host, and local port.
	We connect from the local host, because a multihomed remote
	identd will otherwise give us errors or the wrong answer."""
	return userid(request(rh, "%d, %d" % (rp, lp), wait, port, lh))

def usage():
	log.die("usage: identquery HOST LPORT RPORT [IDENTPORT]")
def main(args = None):
	if args is None:
		args = sys.argv[1:]
	log.setprogname("identquery")
	if len(args) not in (3, 4):
		usage()
	port = IDENTD
	try:
		if len(args) == 4:
			port = int(args[3])
		q = "%d, %d" % (int(args[1]), int(args[2]))
	except ValueError:
		usage()
	answer = request(args[0], q, 10, port)
	if answer is None:
		log.die("no answer from %s port %d" % (args[0], port))
	print(answer)

if __name__ == "__main__":
	main(sys.argv[1:])
