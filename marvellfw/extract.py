# SPDX-License-Identifier: MIT
import os, sys
from enum import Enum

from .header import HeaderFields, artifact_name, provisional_name
from .words import WORD, WordReader, byteswap, pack_word

FW_START = 0x10000000
FW_END = 0xaaaaaaaa
FW_OVERHEAD = 32


def error(s):
    sys.stderr.write(s)
    sys.stderr.write('\n')
    sys.stderr.flush()


class ExtractionError(Exception):
    pass

class SourceOpenFailure(ExtractionError):
    pass

class SinkOpenFailure(ExtractionError):
    pass

class WriteFailure(ExtractionError):
    pass


class FailureKind(Enum):
    LENGTH_MISMATCH = 'length mismatch'
    PREMATURE_END = 'premature end of input'
    FILESYSTEM = 'filesystem operation failed'

class Failure:
    def __init__(self, kind, name, message):
        self.kind = kind
        self.name = name
        self.message = message

    def __repr__(self):
        return f'Failure({self.kind.name}, {self.name!r}, {self.message!r})'

class Artifact:
    def __init__(self, provisional, name, path, offset, fields):
        self.provisional = provisional
        self.name = name
        self.path = path
        self.offset = offset
        self.device = fields.device
        self.version = fields.version
        self.build = fields.build

    def __repr__(self):
        return f'Artifact({self.provisional!r} -> {self.name!r} @ {self.offset:#x})'

class ExtractionResult:
    def __init__(self):
        self.artifacts = []
        self.failures = []

    @property
    def ok(self):
        return not any(f.kind == FailureKind.FILESYSTEM for f in self.failures)


class Session:
    """
    One payload being captured: the output file, the number of bytes written
    so far and the header fields seen in them.
    """
    def __init__(self, path, start, length_word):
        self.path = path
        self.name = os.path.basename(path)
        self.start = start
        self.length_word = length_word
        self.written = 0
        self.fields = HeaderFields()
        try:
            self.f = open(path, 'wb')
        except OSError as e:
            raise SinkOpenFailure(f'open of output file {path} failed, err="{e.strerror or e}"') from e

    def write(self, word):
        data = pack_word(word)
        try:
            n = self.f.write(data)
        except OSError as e:
            n, cause = 0, e.strerror or e
        else:
            cause = 'short write'
        if n != len(data):
            raise WriteFailure(f'write failed at file offset {self.written:#06x}, err="{cause}"')
        self.fields.update(self.written, word)
        self.written += WORD

    def close(self):
        if self.f.closed:
            return
        try:
            self.f.close()
        except OSError as e:
            raise WriteFailure(f'write failed when closing {self.name}, err="{e.strerror or e}"') from e


class State(Enum):
    SCANNING = 0
    CAPTURING = 1


class Extractor:
    def __init__(self, f, output='.', byteorder='little'):
        self.reader = WordReader(f, byteorder)
        self.output = output
        self.state = State.SCANNING
        self.session = None
        self.previous = 0
        self.count = 0
        self.result = ExtractionResult()

    def run(self):
        try:
            while True:
                offset = self.reader.position
                word = self.reader.next_word()
                if word is None:
                    break
                if self.state == State.SCANNING:
                    self.scan(offset, word)
                else:
                    resume = self.capture(word)
                    if resume is not None:
                        self.reader.seek(resume)
        except ExtractionError:
            if self.session:
                self.session.close()
            raise

        if self.state == State.CAPTURING:
            self.premature_end()
        return self.result

    def scan(self, offset, word):
        if word != FW_START:
            self.previous = word
            return

        error(f'found start sequence of FW at offset {offset:#010x}')
        path = os.path.join(self.output, provisional_name(self.count))
        self.count += 1
        self.session = Session(path, offset - WORD, self.previous)
        self.state = State.CAPTURING
        self.session.write(self.previous)
        self.session.write(word)

    def capture(self, word):
        """
        Write one word of the current payload. Returns the offset to resume
        scanning from when the payload turned out to be bogus, else None.
        """
        s = self.session
        s.write(word)
        if word != FW_END:
            return None

        s.close()
        self.session = None
        self.state = State.SCANNING
        print(f'version: {s.fields}')

        expected = byteswap(s.length_word, self.reader.byteorder) + FW_OVERHEAD
        if expected == s.written:
            self.commit(s)
            return None

        error(f'ERROR in fw file {s.name}: length incorrect (should be: {expected}, is: {s.written})')
        error('Deleting file!')
        self.result.failures.append(Failure(FailureKind.LENGTH_MISMATCH, s.name,
            f'expected {expected} bytes, got {s.written}'))
        self.remove(s)
        return s.start + 2 * WORD

    def commit(self, s):
        name = artifact_name(s.fields.device, s.fields.version, s.fields.build)
        path = os.path.join(self.output, name)
        try:
            os.replace(s.path, path)
        except OSError as e:
            error(f'rename of output file failed, err="{e.strerror or e}"')
            self.result.failures.append(Failure(FailureKind.FILESYSTEM, s.name, f'rename to {name}: {e}'))
            return
        self.result.artifacts.append(Artifact(s.name, name, path, s.start, s.fields))

    def remove(self, s):
        try:
            os.unlink(s.path)
        except OSError as e:
            error(f'unlink of output file failed, err="{e.strerror or e}"')
            self.result.failures.append(Failure(FailureKind.FILESYSTEM, s.name, f'unlink: {e}'))

    def premature_end(self):
        s = self.session
        s.close()
        self.session = None
        self.state = State.SCANNING
        error(f'ERROR: premature end of input, incomplete firmware file "{s.name}"')
        error('Deleting it!')
        self.result.failures.append(Failure(FailureKind.PREMATURE_END, s.name,
            f'no end marker after {s.written} bytes'))
        self.remove(s)


def extract(path, output='.', byteorder='little'):
    try:
        f = open(path, 'rb')
    except OSError as e:
        raise SourceOpenFailure(f'open of input file failed, err="{e.strerror or e}"') from e
    with f:
        return Extractor(f, output, byteorder).run()
