"""Tokenize one shell input line into word tokens.

A single left-to-right pass applies quoting, backslash escapes and
expansions. Adjacent quoted and unquoted segments with no whitespace
between them concatenate into one word: '"ab"cd' -> ['abcd'].

Redirection operators ('>', '2>>', ...) come out as ordinary words;
the command parser in pipeline.py gives them meaning.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum

from minishell.charclass import CharClass, QuoteContext, Trigger, classify
from minishell.expansion import (
    Environment,
    ExpansionError,
    is_name_char,
    is_name_start,
    resolve,
)


class State(Enum):
    CHUNKING = "chunking"
    TOKEN_READY = "token_ready"
    EXHAUSTED = "exhausted"


class TokenizerError(ValueError):
    """Malformed input detected while tokenizing."""


class UnterminatedQuote(TokenizerError):
    def __init__(self, quote: QuoteContext) -> None:
        super().__init__(f"unexpected end of input while looking for matching `{quote.value}'")
        self.quote = quote


@dataclass(frozen=True)
class Token:
    """A resolved word plus any expansion errors hit while building it.

    A failed expansion contributes no text; the error is kept here so the
    caller can choose to ignore it, warn, or reject the command.
    """

    text: str
    errors: tuple[ValueError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


class Tokenizer:
    """Pull-based tokenizer for a single input line.

    Iterating yields Token objects. Scanning stops as soon as a token is
    complete and resumes from the same position on the next request.
    Instances are single-use and not reentrant; create one per line.

    step() and finish() drive the machine directly, one character at a
    time, and return the resulting State.
    """

    def __init__(self, line: str, env: Environment | None = None) -> None:
        self._line = line
        self._env = env if env is not None else Environment.from_process()
        self._pos = 0
        self._finished = False

        self.quote = QuoteContext.NONE
        self.pending: Trigger | None = None
        self.state = State.CHUNKING

        self._braced = False
        self._accum: list[str] = []
        self._word: list[str] = []
        self._word_started = False
        self._errors: list[ValueError] = []
        self._ready: deque[Token] = deque()

    def __iter__(self) -> "Tokenizer":
        return self

    def __next__(self) -> Token:
        while not self._ready:
            if self._finished:
                raise StopIteration
            if self._pos < len(self._line):
                ch = self._line[self._pos]
                self._pos += 1
                self.step(ch)
            else:
                self.finish()
        token = self._ready.popleft()
        self._sync_state()
        return token

    def step(self, ch: str) -> State:
        """Consume one character."""
        if self._finished:
            raise TokenizerError("input already exhausted")

        if self.pending is Trigger.ESCAPE:
            self._accum.append(ch)
            self._resolve_pending()
        elif self.pending is Trigger.DOLLAR and self._accumulate(ch):
            pass
        else:
            self._dispatch(ch, classify(ch))
        return self._sync_state()

    def finish(self) -> State:
        """Signal end of input: resolve leftovers and flush the last word."""
        if self._finished:
            return self.state

        if self.pending is not None:
            self._resolve_pending()
        if self.quote is not QuoteContext.NONE:
            self._errors.append(UnterminatedQuote(self.quote))
            self.quote = QuoteContext.NONE
        self._flush()
        self._finished = True
        return self._sync_state()

    def _dispatch(self, ch: str, cls: CharClass) -> None:
        match self.quote:
            case QuoteContext.SINGLE:
                if ch == QuoteContext.SINGLE.value:
                    self.quote = QuoteContext.NONE
                else:
                    self._word.append(ch)
            case QuoteContext.DOUBLE:
                if ch == QuoteContext.DOUBLE.value:
                    self.quote = QuoteContext.NONE
                elif cls is CharClass.TRIGGER and Trigger(ch) in (Trigger.DOLLAR, Trigger.ESCAPE):
                    self.pending = Trigger(ch)
                else:
                    self._word.append(ch)
            case QuoteContext.NONE:
                self._dispatch_unquoted(ch, cls)

    def _dispatch_unquoted(self, ch: str, cls: CharClass) -> None:
        match cls:
            case CharClass.SEPARATOR:
                self._flush()
                return
            case CharClass.QUOTE:
                self.quote = QuoteContext(ch)
            case CharClass.TRIGGER:
                trigger = Trigger(ch)
                if trigger in (Trigger.DOLLAR, Trigger.ESCAPE):
                    self.pending = trigger
                else:
                    # ~ and * need no payload
                    self._expand(trigger, "")
            case CharClass.ORDINARY:
                self._word.append(ch)
        self._word_started = True

    def _accumulate(self, ch: str) -> bool:
        """Feed ch to the open $NAME.

        Returns False when ch terminates the name without being part of
        it; the name is resolved and ch still needs dispatching.
        """
        if self._braced:
            if ch == "}":
                self._resolve_pending(closed=True)
                return True
            # an unclosed ${NAME stops where a bare $NAME would
            if classify(ch) is CharClass.SEPARATOR or ch == self.quote.value:
                self._resolve_pending()
                return False
            self._accum.append(ch)
            return True
        if ch == "{" and not self._accum:
            self._braced = True
            return True
        if (is_name_char if self._accum else is_name_start)(ch):
            self._accum.append(ch)
            return True
        self._resolve_pending()
        return False

    def _resolve_pending(self, closed: bool = False) -> None:
        trigger, text, braced = self.pending, "".join(self._accum), self._braced
        self.pending = None
        self._braced = False
        self._accum.clear()
        if braced and not text:
            # ${} names nothing; keep it as typed
            self._word.append("${}" if closed else "${")
            return
        self._expand(trigger, text)

    def _expand(self, trigger: Trigger, text: str) -> None:
        try:
            self._word.append(resolve(trigger, text, self.quote, self._env))
        except ExpansionError as e:
            self._errors.append(e)

    def _flush(self) -> None:
        if not self._word_started:
            return
        self._ready.append(Token("".join(self._word), tuple(self._errors)))
        self._word.clear()
        self._errors.clear()
        self._word_started = False

    def _sync_state(self) -> State:
        if self._ready:
            self.state = State.TOKEN_READY
        elif self._finished:
            self.state = State.EXHAUSTED
        else:
            self.state = State.CHUNKING
        return self.state


def tokenize(line: str, env: Environment | None = None) -> list[str]:
    """Tokenize a line and return the word texts.

    Failed expansions contribute empty text, so an undefined $VAR yields
    an empty word rather than an error.
    """
    return [token.text for token in Tokenizer(line, env)]
