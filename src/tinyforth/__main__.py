## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# tinyforth — A tiny Forth compiler to bytecode, and the stack machine running it.
#

import sys
import time
from pathlib import Path
from dataclasses import dataclass

import click

from .runtime import Evaluator
from .formatting import write_without_ansi, format_prompt


SOURCE_SUFFIXES = ('.fs', '.fth', '.4th', '.forth')


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    ignore: bool
    stats: bool
    plain: bool


@dataclass
class ExecutionItem:
    source: str
    filename: str


class ForthRunner:
    def __init__(self, config: RuntimeConfig):
        self.verbose = config.verbose
        self.ignore = config.ignore
        self.stats_enabled = config.stats
        self.plain = config.plain

        if self.plain:
            writer = write_without_ansi(sys.stdout.write)
            sys.stdout.write, sys.stderr.write = writer, writer

        self.total_stats = {'steps': 0, 'start': time.time()} if self.stats_enabled else None
        self.failure = False
        self.executed_items = 0
        self.pending_newline = False
        self.evaluator = Evaluator(error_handler=self._report_error, verbosity=self.verbose, stats=self.total_stats)

    def _report_error(self, message: str) -> None:
        # Output produced before the failing instruction comes first.
        self._write_output()
        self._end_output_line()
        print(f'\033[30;43m ERROR. \033[0m {message}', file=sys.stderr)

    def _write_output(self) -> None:
        if output := self.evaluator.read_and_reset_output():
            sys.stdout.write(output)
            sys.stdout.flush()
            self.pending_newline = not output.endswith('\n')

    def _end_output_line(self) -> None:
        if self.pending_newline:
            sys.stdout.write('\n')
            self.pending_newline = False

    def _maybe_fatal_error(self, is_repl: bool = False) -> None:
        self.failure = True
        if not is_repl and not self.ignore:
            self._end_output_line()
            sys.exit(1)

    def execute_items(self, items: list[ExecutionItem]) -> None:
        for item in items:
            self._execute_script(item.source, item.filename)

    def _execute_script(self, source: str, filename: str) -> None:
        for number, line in enumerate(source.splitlines(), start=1):
            ok = self.evaluator.evaluate(line)
            self._write_output()
            if not ok:
                print(f'\033[90m  File "{filename}", line {number}\033[0m', file=sys.stderr)
                self._maybe_fatal_error()

        if self.evaluator.is_compiling:
            self.evaluator.compiler.reset()
            self._report_error(f"unterminated definition or control structure at end of {filename}")
            self._maybe_fatal_error()
        else:
            self.executed_items += 1
        self._end_output_line()

    def repl(self) -> None:
        if sys.platform != "win32": import readline

        print('tinyforth - Forth compiler and stack machine REPL; type Ctrl+C to exit.')

        while True:
            try:
                if self.evaluator.is_compiling:
                    prompt = "\033[36m... \033[0m"
                else:
                    prompt = f"\033[90m{format_prompt(self.evaluator.stack)}\033[0m \033[36m==> \033[0m"
                line = input(prompt)
                if line.strip() in ('quit', 'exit', 'BYE'): break

                self.evaluator.evaluate(line)
                self._write_output()
                self._end_output_line()

            except (KeyboardInterrupt, EOFError):
                print(""); break

    def finalize(self) -> int:
        """Print statistics for the scripts that ran, and return the process exit status."""
        if self.total_stats is not None and self.executed_items > 0:
            elapsed_time = time.time() - self.total_stats['start']
            print(f"\n\033[97m\033[48;5;30m STATISTICS. \033[0m")
            for label, value in (('step', f"{self.total_stats['steps']:,}"),
                                 ('words', f"{len(self.evaluator.list_words()):,}"),
                                 ('time', f"{elapsed_time:.3f}s")):
                print(f"{label}\t\033[97m{value}\033[0m")
        return 1 if self.failure else 0


def _inline_command_source(index: int, command: str) -> ExecutionItem:
    return ExecutionItem(command.rstrip() + '\n', f'<INPUT_{index}>')


COMMAND_OPTIONS = ('-c', '--command')
REPL_OPTIONS = ('-r', '--repl')

def _parse_dev_tokens(tokens: list[str]) -> list[tuple[str, Path | str | None]]:
    """Ordered actions for `run-dev`: source files, inline lines of Forth, and interactive sessions."""
    actions: list[tuple[str, Path | str | None]] = []
    tokens = iter(tokens)
    for token in tokens:
        if token in COMMAND_OPTIONS:
            if (source := next(tokens, None)) is None:
                raise click.BadParameter(f"Missing Forth source after {token}.")
            actions.append(('command', source))
        elif token.startswith('--command='):
            actions.append(('command', token.split('=', 1)[1]))
        elif token in REPL_OPTIONS:
            actions.append(('repl', None))
        elif token.startswith('-'):
            raise click.BadParameter(f"Unknown option `{token}`.")
        elif (path := Path(token)).suffix not in SOURCE_SUFFIXES:
            raise click.BadParameter(f"Expected Forth source file ({', '.join(SOURCE_SUFFIXES)}), got `{token}`.")
        elif not path.exists():
            raise click.BadParameter(f"File `{token}` not found.")
        else:
            actions.append(('file', path))
    return actions


@click.group(invoke_without_command=True, context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.option('--verbose', '-v', default=0, count=True, help='Trace calls (-v) or every instruction (-vv).')
@click.option('--ignore', '-i', is_flag=True, help='Ignore errors and continue executing.')
@click.option('--stats', is_flag=True, help='Display execution statistics (e.g., number of steps).')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes and redirect stderr to stdout.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, ignore: bool, stats: bool, plain: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, ignore=ignore, stats=stats, plain=plain)


@cli.command('run-file')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = ForthRunner(ctx.obj['config'])
    runner.execute_items((ExecutionItem(script.read(), script.name or '<STDIN>'),))
    ctx.exit(runner.finalize())


@cli.command('run-dev', context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.argument('tokens', nargs=-1)
@click.pass_context
def run_dev(ctx: click.Context, tokens: tuple[str, ...]) -> None:
    runner = ForthRunner(ctx.obj['config'])
    actions = _parse_dev_tokens(list(tokens))

    command_index = 1
    for action, payload in actions:
        if action == 'file':
            runner.execute_items((ExecutionItem(payload.read_text(encoding='utf-8'), str(payload)),))
        elif action == 'command':
            runner.execute_items((_inline_command_source(command_index, payload),))
            command_index += 1
        elif action == 'repl':
            runner.repl()
        else:
            raise NotImplementedError

    if not actions:
        runner.repl()
    ctx.exit(runner.finalize())


@cli.command('run-repl')
@click.pass_context
def run_repl(ctx: click.Context) -> None:
    runner = ForthRunner(ctx.obj['config'])
    runner.repl()
    ctx.exit(runner.finalize())


GLOBAL_FLAGS = ('--ignore', '--stats', '--plain', '--verbose', '-i', '-p')

def main(argv: list[str] | None = None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    flags = [t for t in args if t in GLOBAL_FLAGS or t.startswith('-v')]
    rest = [t for t in args if t not in flags]

    if not rest:
        # Piped input runs as a script; a terminal gets the REPL.
        cmd, tail = ('run-file', ['-']) if not sys.stdin.isatty() else ('run-repl', [])
    elif rest in (['--repl'], ['-r']):
        cmd, tail = 'run-repl', []
    elif len(rest) == 1 and (rest[0] == '-' or Path(rest[0]).is_file()):
        cmd, tail = 'run-file', rest
    else:
        cmd, tail = 'run-dev', rest

    cli.main(args=[*flags, cmd, *tail], prog_name='tinyforth')


if __name__ == "__main__":
    main()
