import io
import os
import tempfile
import unittest

from lox.core.tokens import TokenType
from lox.lang.error import ErrorHandler
from lox.lang.session import Session


def session(path=Session.SH_FILE, cmd_line=True):
    error_handler = ErrorHandler(fatal=False, stream=io.StringIO(), color=False)
    out = io.StringIO()
    return Session(error_handler, path, cmd_line, out=out), out


class SessionTestCase(unittest.TestCase):

    def test_state_persists_between_units(self):
        sess, out = session()
        should_pass = [
            "var greeting = \"hello\";",
            "fun shout(s) { return s + \"!\"; }",
            "class Box { init(v) { this.v = v; } }",
            "print shout(greeting);",
            "print Box(3).v;",
        ]
        for case in should_pass:
            self.assertTrue(sess.add(case), case)
            sess.run()

        self.assertEqual("hello!\n3\n", out.getvalue())
        self.assertFalse(sess.error_handler.had_error)

    def test_static_error_queues_nothing(self):
        sess, out = session()
        should_fail = ["print 1; print ;", "print 1; @", "print 1; return 2;"]
        for case in should_fail:
            sess.error_handler.reset()
            self.assertFalse(sess.add(case), case)
            self.assertEqual([], sess.to_exec, case)

        sess.run()
        self.assertEqual("", out.getvalue())

    def test_runtime_error_drops_rest_of_unit(self):
        sess, out = session()
        sess.add("print 1; print nil + 1; print 2;")
        sess.run()

        self.assertEqual("1\n", out.getvalue())
        self.assertTrue(sess.error_handler.had_runtime_error)
        self.assertEqual([], sess.to_exec)

        # the session is still usable
        sess.error_handler.reset()
        sess.add("print 3;")
        sess.run()
        self.assertEqual("1\n3\n", out.getvalue())

    def test_runtime_error_restores_global_scope(self):
        sess, out = session()
        should_fail = ["{ var a = 1; print nil + 1; }", "fun f() { var a = 1; { return -\"x\"; } } f();"]
        for case in should_fail:
            sess.error_handler.reset()
            sess.add(case)
            sess.run()
            self.assertTrue(sess.error_handler.had_runtime_error, case)
            self.assertIs(sess.interpreter.globals, sess.interpreter.environment, case)

        sess.error_handler.reset()
        sess.add("var b = 2; print b;")
        sess.run()
        self.assertEqual("2\n", out.getvalue())
        self.assertIn("b", sess.interpreter.globals)

    def test_tokens_of_last_unit(self):
        sess, __ = session()
        sess.add("var a = 1;")
        self.assertEqual([TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NUMBER, TokenType.SEMICOLON,
                          TokenType.EOF], [token.type for token in sess.tokens])

    def test_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "prog.lox")
            with open(path, "w", encoding="utf-8") as file:
                file.write("var x = 2;\nprint x * 21;\n")

            sess, out = session(path, cmd_line=False)
            self.assertEqual(2, len(sess.to_exec))
            sess.run()
            self.assertEqual("42\n", out.getvalue())

    def test_missing_file(self):
        error_handler = ErrorHandler(fatal=True, stream=io.StringIO(), color=False)
        with self.assertRaises(SystemExit) as cm:
            Session(error_handler, os.path.join(tempfile.gettempdir(), "does", "not", "exist.lox"), cmd_line=False)
        self.assertEqual(Session.NO_INPUT_CODE, cm.exception.code)
        self.assertIn("could not be opened", error_handler.stream.getvalue())

    def test_reserved_filename(self):
        error_handler = ErrorHandler(fatal=True, stream=io.StringIO(), color=False)
        with self.assertRaises(SystemExit) as cm:
            Session(error_handler, Session.SH_FILE, cmd_line=False)
        self.assertEqual(Session.USAGE_ERROR_CODE, cm.exception.code)

    def test_preprocess_line(self):
        cases = {
            "print 1;": False,
            "fun f() {": True,
            "print (1 +": True,
            "{ }": False,
            "var s = 1; // {": False,
            "}": False,
        }
        for case, expected in cases.items():
            source, unbalanced = Session.preprocess_line(case)
            self.assertEqual(case + "\n", source)
            self.assertEqual(expected, unbalanced, case)

        source, unbalanced = Session.preprocess_line("}", "fun f() {\n  print 1;\n")
        self.assertEqual("fun f() {\n  print 1;\n}\n", source)
        self.assertFalse(unbalanced)


if __name__ == '__main__':
    unittest.main()
