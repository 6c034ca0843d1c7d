"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd

from lox.lang.session import Session


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information, 'exit' or Ctrl-D to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary Lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.error_handler.reset()  # a mistake on one line should not end the session
            if self.sess.add(source):
                self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically typed scripting language with closures, classes and \n"
              "single inheritance. Each line you type is run right away, and variables, \n"
              "functions and classes you declare stay around for the following lines.\n\n"
              "Try it out by typing 'var greeting = \"hello\";' and then 'print greeting;'. \n"
              "Unfinished blocks continue on the next line.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        if self._tmp_line:
            self.sess.error_handler.warn("unfinished input discarded")
            self._tmp_line = ""
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
