# SPDX-License-Identifier: MIT
from construct import Int32ub, Int32ul

WORD = 4

def bswap16(x):
    x = (x & 0xff00ff00) >>  8 | (x & 0x00ff00ff) <<  8
    return x

def byteswap(x, byteorder='little'):
    """
    The driver stores data in big-endian 16-bit chunks: convert both halves
    of a word to host order, keeping each half where it is.
    """
    if byteorder == 'big':
        return x
    return bswap16(x)

def pack_word(x):
    # Output byte order is byte1, byte0, byte3, byte2 on any host
    return Int32ul.build(bswap16(x))

class WordReader:
    def __init__(self, f, byteorder='little'):
        self.f = f
        self.byteorder = byteorder
        self.word = Int32ul if byteorder == 'little' else Int32ub
        self.position = f.tell()

    def next_word(self):
        data = self.f.read(WORD)
        if len(data) < WORD:
            return None
        self.position += WORD
        return self.word.parse(data)

    def seek(self, offset):
        self.f.seek(offset)
        self.position = offset
