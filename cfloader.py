#
# Load our configuration file.
#
# The configuration file is optional; every directive has a default.
# We do not check that the lsof command actually exists here. If it
# doesn't, every lookup fails and says so in the logs.

import readcf
import util
import lookup

class BadInput(Exception):
	pass

DEFAULTLISTEN = ('', '113')
DURATIONS = ('timeout', 'lookuptimeout')

class IdentConfig:
	def __init__(self):
		# 'listen' accumulates; everything else is set at most once.
		self.cf = {'listen': []}

	# The result of __str__ parses back to an identical configuration.
	def __str__(self):
		lines = []
		for k in sorted(self.cf):
			if k == 'listen':
				continue
			v = self.cf[k]
			if k in DURATIONS:
				v = "%ss" % v
			lines.append("%s %s" % (k, v))
		lines.extend("listen %s@%s" % (p, h)
			     for h, p in sorted(self.cf['listen']))
		return "".join(l + "\n" for l in lines)

	def __getitem__(self, name):
		return self.cf[name]
	def __contains__(self, name):
		return name in self.cf
	def get(self, name, default = None):
		return self.cf.get(name, default)

	# No listen directives means the ident port on every address of
	# both families.
	def getlisten(self):
		return self.cf['listen'] or [DEFAULTLISTEN]
	def getlookup(self):
		return lookup.LsofLookup(self.get('lsof', lookup.LSOF),
					 self.get('lookuptimeout',
						  lookup.LOOKUPTIMEOUT))

	def _lsof(self, d, arg):
		return arg
	def _duration(self, d, arg):
		secs = util.getsecs_or_raise(arg, BadInput)
		if secs <= 0:
			raise BadInput("%s must be positive" % (d,))
		return secs
	def _maxthreads(self, d, arg):
		n = util.int_or_raise(arg, BadInput)
		if n < 0:
			raise BadInput("maxthreads cannot be negative")
		return n
	# The address may be wildcarded but the port may not.
	def _listen(self, d, arg):
		hp = util.gethostport(arg)
		if not hp:
			raise BadInput("bad argument to listen")
		if not hp[1]:
			raise BadInput("listen requires a port")
		self.cf['listen'].append(hp)
		return None

	directives = {
		'lsof': _lsof,
		'timeout': _duration,
		'lookuptimeout': _duration,
		'maxthreads': _maxthreads,
		'listen': _listen,
		}

	# Every line is 'directive argument'.
	def parseline(self, line, lineno):
		n = line.split()
		if len(n) != 2:
			raise BadInput("badly formatted line")
		d, arg = n
		if d not in self.directives:
			raise BadInput("unknown config file directive " + d)
		if d != 'listen' and d in self.cf:
			raise BadInput("can only give one %s directive" % (d,))
		v = self.directives[d](self, d, arg)
		if d != 'listen':
			self.cf[d] = v

def fromfile(fp, fname):
	cf = IdentConfig()
	readcf.readcf(fp, fname, cf.parseline, BadInput)
	return cf

def parsefile(fname):
	try:
		with open(fname, "r") as fp:
			return fromfile(fp, fname)
	except OSError as e:
		raise BadInput("cannot open %s: %s" % (fname, e))
