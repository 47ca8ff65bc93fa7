#
# Log messages for the rest of the program. Only the daemon core and the
# session code log; everyone else raises exceptions.
#
# Messages go either to a file (normally stderr), as 'progname: message',
# or to syslog. Sessions log from their own threads, so everything about
# where messages go lives on one object behind one lock.

import sys
import syslog
import threading

class LogTarget:
	def __init__(self, fp):
		# Reentrant: the SIGUSR1 status report logs from a signal
		# handler, which may interrupt the main thread inside emit().
		self.lock = threading.RLock()
		self.progname = "lsofidentd"
		self.debuglevel = 0
		# None means syslog.
		self.fp = fp

	# We never close the file; it is probably stderr.
	def _release(self):
		if self.fp is None:
			syslog.closelog()
		else:
			self.fp.flush()

	def tofile(self, fp):
		with self.lock:
			self._release()
			self.fp = fp
	def tosyslog(self, facil):
		with self.lock:
			self._release()
			syslog.openlog(self.progname, syslog.LOG_PID, facil)
			self.fp = None

	def emit(self, lvl, msg):
		with self.lock:
			if self.fp is not None:
				self.fp.write("%s: %s\n" % (self.progname, msg))
				self.fp.flush()
			elif "\0" in msg:
				# syslog() wants a C string.
				syslog.syslog(lvl, msg.replace("\0", "\\0"))
			else:
				syslog.syslog(lvl, msg)

target = LogTarget(sys.stderr)

def setprogname(newname):
	target.progname = newname
def setdebuglevel(lvl):
	target.debuglevel = lvl
def usestderr(fp = None):
	if fp is None:
		fp = sys.stderr
	target.tofile(fp)
def usesyslog(facil = syslog.LOG_DAEMON):
	target.tosyslog(facil)

def die(msg):
	target.emit(syslog.LOG_ALERT, msg)
	sys.exit(1)
def warn(msg):
	target.emit(syslog.LOG_WARNING, msg)
def error(msg):
	target.emit(syslog.LOG_ERR, msg)
def report(msg):
	target.emit(syslog.LOG_INFO, msg)
def debug(lvl, msg):
	if target.debuglevel >= lvl:
		target.emit(syslog.LOG_DEBUG, msg)
