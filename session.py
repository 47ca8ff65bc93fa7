#
# Handle one ident client connection from start to finish.
#
# A session reads exactly one query line, works out who owns the
# connection it asks about, writes exactly one answer line, and closes
# the connection. Its states, in order:
#	AWAITING	reading the query line
#	PARSING		turning it into a port pair
#	INVOKING	running the connection lookup (lsof)
#	MATCHING	finding the owner in the lookup output
#	RESPONDING	writing the answer
#	CLOSED		done, socket closed; reached exactly once
# Any failure goes straight to CLOSED. Only a bad query gets an error
# answer; if the client sent nothing usable, or our own lookup failed,
# the client gets nothing at all.

import identerr
import log
import msgs
import owner
import proc
import query

AWAITING = "awaiting"
PARSING = "parsing"
INVOKING = "invoking"
MATCHING = "matching"
RESPONDING = "responding"
CLOSED = "closed"

# No sane ident query is anywhere near this long.
MAXLINE = 1024
READSIZE = 1024

class Session:
	def __init__(self, sock, lookup, timeout = None):
		self.sock = sock
		self.lookup = lookup
		self.timeout = timeout
		self.state = AWAITING
		self.peer = None
		self.query = None
		self.answer = None
		# The state we were in when something blew up, if anything.
		self.abortedin = None

	def peername(self):
		if self.peer:
			return self.peer[:2]
		return ('?', '?')

	# Read one line; CRLF is what the RFC wants, but we settle for LF.
	# If the client half-closes after an unterminated query we take
	# what we got as the line.
	def readquery(self):
		buf = b""
		saweol = 0
		while 1:
			r = self.sock.recv(READSIZE)
			if not r:
				break
			buf += r
			pos = buf.find(b"\n")
			if pos >= 0:
				buf = buf[:pos]
				saweol = 1
				break
			# Allow for a CR that is still waiting for its LF.
			if len(buf) > MAXLINE + 1:
				raise identerr.NoQuery("query line too long")
		if not (buf or saweol):
			raise identerr.NoQuery("connection closed")
		if buf.endswith(b"\r"):
			buf = buf[:-1]
		if len(buf) > MAXLINE:
			raise identerr.NoQuery("query line too long")
		try:
			return buf.decode("utf-8")
		except UnicodeDecodeError:
			raise identerr.NoQuery("query is not valid UTF-8")

	def respond(self, fmt, user = None):
		self.answer = msgs.response(fmt, self.query, user)
		self.sock.sendall(self.answer.encode("utf-8"))

	def run(self):
		try:
			self.peer = self.sock.getpeername()
			log.debug(2, msgs.format(msgs.logaccept, self.peername()))
			if self.timeout:
				self.sock.settimeout(self.timeout)

			self.query = self.readquery()

			self.state = PARSING
			try:
				lport, rport = query.parse(self.query)
			except identerr.InvalidPort:
				self.respond(msgs.invalidport)
				raise

			# The remote IP always comes from the socket, never
			# from anything the client says.
			self.state = INVOKING
			output = self.lookup.lookup(rport, self.peer[0])

			self.state = MATCHING
			user = owner.find(lport, output)

			self.state = RESPONDING
			if user is None:
				self.respond(msgs.nouser)
			else:
				self.respond(msgs.userid, user)
		except Exception:
			self.abortedin = self.state
			raise
		finally:
			self.state = CLOSED
			proc.closesock(self.sock)

# Errors are dispatched on their kind. Client mistakes are not worth
# more than a debug message, except for bad queries, which we answered
# and report. Lookup failures are ours and get logged as errors.
def _logerror(s, e):
	peer = s.peername()
	if e.kind is identerr.Kind.NOQUERY:
		log.debug(1, msgs.format(msgs.lognoquery, peer, error = e))
	elif e.kind is identerr.Kind.INVALIDPORT:
		log.report(msgs.format(msgs.loginvalid, peer,
				       query = s.query, error = e))
	else:
		log.error(msgs.format(msgs.loglookup, peer,
				      query = s.query, error = e))

def handle(sock, lookup, timeout = None):
	"""Run a complete ident session on an accepted socket.

	All session errors are logged and contained here. Returns the
	finished Session."""
	s = Session(sock, lookup, timeout)
	try:
		s.run()
	except identerr.IdentError as e:
		_logerror(s, e)
	except OSError as e:
		# Includes socket timeouts; the client went away or stalled.
		log.debug(1, msgs.format(msgs.logsockerr, s.peername(),
					 state = s.abortedin, error = e))
	except Exception as e:
		# A broken lookup object must not take the daemon down.
		log.error(msgs.format(msgs.logfault, s.peername(),
				      state = s.abortedin, error = repr(e)))
	else:
		log.debug(1, msgs.format(msgs.loganswer, s.peername(),
					 query = s.query,
					 answer = s.answer.rstrip()))
	return s
