#
# Ask lsof which local connections go to a given remote endpoint.
#
# The listening socket is normally dual-stack, so IPv4 clients show up
# with IPv4-mapped IPv6 peer addresses (::ffff:a.b.c.d). lsof's -i
# filter has to be handed the plain IPv4 address in that case or it will
# not match anything.
#
# Anything with a .lookup(remote_port, remote_ip) method that returns
# lsof -F Ln style output (as bytes) can stand in for LsofLookup; the
# session code does not care where the listing comes from.

import ipaddress
import subprocess

import identerr

LSOF = "lsof"
# lsof can be slow on a busy machine, but not this slow.
LOOKUPTIMEOUT = 30

def _ipaddr(ip):
	if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
		return ip
	# Link-local peers come with a zone that lsof does not understand.
	return ipaddress.ip_address(str(ip).split("%", 1)[0])

def target(remote_port, remote_ip):
	"""Return the lsof -i argument selecting TCP connections to the
	remote IP and port."""
	ip = _ipaddr(remote_ip)
	if ip.version == 6 and ip.ipv4_mapped is not None:
		ip = ip.ipv4_mapped
	if ip.version == 4:
		return "4TCP@%s:%d" % (ip, remote_port)
	# str() of an IPv6Address may still carry a scope id.
	return "6TCP@[%s]:%d" % (str(ip).split("%", 1)[0], remote_port)

def command(remote_port, remote_ip, cmd = LSOF):
	# -F Ln: only login and name fields. -n and -P: no host or port
	# name lookups, so that ports come out as numbers.
	return [cmd, "-i", target(remote_port, remote_ip), "-F", "Ln",
		"-n", "-P"]

def invoke(remote_port, remote_ip, cmd = LSOF, timeout = LOOKUPTIMEOUT):
	"""Run lsof for the remote endpoint and return its standard output.

	Raises identerr.LookupFailed if lsof cannot be run, dies on a
	signal, or takes longer than timeout seconds. lsof exits with
	status 1 when nothing matched; that is not a failure."""
	args = command(remote_port, remote_ip, cmd)
	try:
		res = subprocess.run(args, stdin = subprocess.DEVNULL,
				     stdout = subprocess.PIPE,
				     stderr = subprocess.DEVNULL,
				     timeout = timeout)
	except subprocess.TimeoutExpired:
		raise identerr.LookupFailed("%s timed out after %s seconds" % \
					    (cmd, timeout))
	except (OSError, subprocess.SubprocessError) as e:
		raise identerr.LookupFailed("cannot run %s: %s" % (cmd, e))
	if res.returncode < 0:
		raise identerr.LookupFailed("%s killed by signal %d" % \
					    (cmd, -res.returncode))
	return res.stdout

class LsofLookup:
	def __init__(self, cmd = LSOF, timeout = LOOKUPTIMEOUT):
		self.cmd = cmd
		self.timeout = timeout
	def lookup(self, remote_port, remote_ip):
		return invoke(remote_port, remote_ip, self.cmd, self.timeout)
	def __str__(self):
		return "<lsof lookup: %s, timeout %s>" % (self.cmd, self.timeout)
