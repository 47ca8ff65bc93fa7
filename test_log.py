#
# File logging is checked through a StringIO; syslog is shimmed out.
import io
import syslog
import threading
import unittest

import log

class fileTests(unittest.TestCase):
	def setUp(self):
		self.si = io.StringIO()
		log.usestderr(self.si)
	def tearDown(self):
		log.usestderr()
		log.setdebuglevel(0)
		log.setprogname("lsofidentd")

	def testLevels(self):
		"Debug messages above the current level are dropped."
		log.setprogname("identtest")
		log.setdebuglevel(2)
		log.error("first")
		log.debug(1, "second")
		log.debug(2, "third")
		log.debug(3, "fourth")
		self.assertEqual(self.si.getvalue(),
				 "identtest: first\nidenttest: second\nidenttest: third\n")

	def testThreadedLines(self):
		"Log lines from many threads come out whole."
		def spew(n):
			for i in range(50):
				log.report("thread %d line %d" % (n, i))
		ths = [threading.Thread(target = spew, args = (n,))
		       for n in range(8)]
		for t in ths:
			t.start()
		for t in ths:
			t.join()
		lines = self.si.getvalue().splitlines()
		self.assertEqual(len(lines), 400)
		for l in lines:
			self.assertRegex(l, r"^lsofidentd: thread \d line \d+$")

	def testDie(self):
		"die() logs and exits with status 1."
		with self.assertRaises(SystemExit) as cm:
			log.die("all over")
		self.assertEqual(cm.exception.code, 1)
		self.assertEqual(self.si.getvalue(), "lsofidentd: all over\n")

class syslogTests(unittest.TestCase):
	shimmed = ('syslog', 'openlog', 'closelog')
	def setUp(self):
		self.sent = []
		self.saved = {n: getattr(syslog, n) for n in self.shimmed}
		syslog.syslog = lambda lvl, msg: self.sent.append((lvl, msg))
		syslog.openlog = lambda *args: None
		syslog.closelog = lambda: None
	def tearDown(self):
		log.usestderr()
		for n, f in self.saved.items():
			setattr(syslog, n, f)

	def testNulls(self):
		"NULs are escaped before they reach syslog()."
		log.usesyslog()
		log.warn("some \0 nulls \0 here")
		self.assertEqual(self.sent,
				 [(syslog.LOG_WARNING, "some \\0 nulls \\0 here")])

	def testPriorities(self):
		log.usesyslog()
		log.report("info")
		log.error("err")
		log.debug(1, "not shown")
		self.assertEqual(self.sent, [(syslog.LOG_INFO, "info"),
					     (syslog.LOG_ERR, "err")])

if __name__ == "__main__":
	unittest.main()
