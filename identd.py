#!/usr/bin/python3
#
# The actual core, high-level logic of lsofidentd.
# This is basically: process arguments, establish logging, read the
# config file, set up server sockets, and then go into the main loop,
# which repeatedly gets new connections and hands each one to its own
# session thread.
#

import sys
import getopt
import threading

import log
import cfloader
import proc
import session

# sesslock guards the counters below, which session threads update as
# they finish. Sessions share nothing else.
sesslock = threading.Lock()
threadcount = 0
threadhigh = 0
# Total connections ever, because we like to know this sort of trivia.
totconnects = 0

# How often serve() looks at its stop event, if it has one.
STOPPOLL = 0.2

# Report information on current state.
def repstate():
	log.report("status: total lifetime connections: %d" % (totconnects,))
	log.report("status: %d active sessions (%d highwater)." % \
		   (threadcount, threadhigh))

# What sessions need to know to run, settled once at startup.
class ServeConf:
	def __init__(self, cfg, lookupobj = None):
		# maxthreads of 0 (or no maxthreads) means no limit.
		self.max = cfg.get('maxthreads', 0)
		self.timeout = cfg.get('timeout')
		if lookupobj is None:
			lookupobj = cfg.getlookup()
		self.lookup = lookupobj
		# One slot per session thread we may run at once.
		self.slots = None
		if self.max:
			self.slots = threading.BoundedSemaphore(self.max)

def threadsession(newsock, scfg):
	global threadcount
	try:
		session.handle(newsock, scfg.lookup, scfg.timeout)
	finally:
		with sesslock:
			threadcount -= 1
		if scfg.slots is not None:
			scfg.slots.release()

# Wait for a free session slot. Returns False if we were stopped first.
def getslot(scfg, stop):
	if scfg.slots.acquire(blocking = False):
		return True
	log.debug(1, "too many sessions, waiting for one to finish")
	if stop is None:
		return scfg.slots.acquire()
	while not stop.is_set():
		if scfg.slots.acquire(timeout = STOPPOLL):
			return True
	return False

# Dispatch a new socket to its own session thread. If we are at our
# thread limit, we wait for a session to finish first; this stops us
# accepting more connections until one does, which is the point. The
# accept loop never does session I/O itself.
def dispatch(newsock, scfg, stop = None):
	global threadcount, threadhigh, totconnects
	with sesslock:
		totconnects += 1
	if scfg.slots is not None and not getslot(scfg, stop):
		proc.closesock(newsock)
		return
	# We count the thread before it starts so that it is never missing
	# from a status report.
	with sesslock:
		threadcount += 1
		if threadcount > threadhigh:
			threadhigh = threadcount
	th = threading.Thread(target = threadsession,
			      args = (newsock, scfg), daemon = True)
	try:
		th.start()
	except RuntimeError as e:
		with sesslock:
			threadcount -= 1
		if scfg.slots is not None:
			scfg.slots.release()
		log.error("cannot start session thread: %s" % (e,))
		proc.closesock(newsock)

def accepterr(e):
	log.warn("error accepting connection: %s" % (e,))

def serve(sockl, scfg, stop = None):
	"""Accept and dispatch connections on sockl forever, or until the
	stop event (if any) is set."""
	tmo = None
	if stop is not None:
		tmo = STOPPOLL
	while stop is None or not stop.is_set():
		for newsock in proc.nextconnection(sockl, tmo, accepterr):
			dispatch(newsock, scfg, stop)

def loadcfg(cfname):
	if cfname is None:
		return cfloader.IdentConfig()
	try:
		return cfloader.parsefile(cfname)
	except cfloader.BadInput as e:
		log.die("Cannot load conf file: %s" % (e,))

def startup(cfname, checkonly):
	cfg = loadcfg(cfname)
	# If we are just checking, we're done now.
	if checkonly:
		log.debug(1, "configuration:\n" + str(cfg).rstrip())
		log.debug(1, "No problems found.")
		return

	sockl = []
	for h, p in cfg.getlisten():
		try:
			sockl.append(proc.getsocket(h, p))
		except proc.Kaboom as e:
			log.die("Could not establish socket %s@%s: %s" % \
				(p, h, e))
	scfg = ServeConf(cfg)
	log.report("listening on %s using %s" % \
		   (" ".join(["%s@%s" % (p, h or "::")
			      for h, p in cfg.getlisten()]), scfg.lookup))

	proc.initsignals(repstate)
	serve(sockl, scfg)

def usage():
	log.die("usage: lsofidentd [-v|-V NUM] [-p PROGNAME] [-l] [-C] [conffile]")
def main(sargs = None):
	if sargs is None:
		sargs = sys.argv[1:]
	usesyslog = 0
	checkonly = 0
	try:
		opts, args = getopt.getopt(sargs, "vV:p:lC", [])
	except getopt.error as cause:
		log.warn(str(cause))
		usage()
	for o, a in opts:
		if o == '-v':
			log.setdebuglevel(1)
		elif o == '-V':
			try:
				log.setdebuglevel(int(a))
			except ValueError:
				log.die("Bad debug level '%s'" % (a,))
		elif o == '-p':
			log.setprogname(a)
		elif o == '-l':
			usesyslog = 1
		elif o == '-C':
			checkonly = 1
	if len(args) > 1:
		usage()
	# We switch to syslog immediately on startup if told to; all further
	# errors, even fatal ones, emerge through there.
	if usesyslog:
		log.usesyslog()

	if args:
		startup(args[0], checkonly)
	else:
		startup(None, checkonly)

if __name__ == "__main__":
	main(sys.argv[1:])
