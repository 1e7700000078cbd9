"""mkshort.py: Fit free-text names into the fixed-width name fields."""

import re
from . import logger as mod_logger


class MakeShort:
    """Short name generator.

    The generator is configured with the maximum length of the name, the
    characters that must not appear in it, whether it must be upper case or
    unique, how whitespace is treated, and the name to use when nothing is
    left.

    Names that are too long are shortened by deleting lowercase vowels from the
    end, keeping vowels that start a word, and finally truncated.

    >>> sh = MakeShort(length=11, defname='WPT')
    >>> sh.mkshort('Lake Michigan Marina')
    'Lk Mchgn Mr'

    """
    vowels = 'aeiou'

    def __init__(self, length=8, badchars='', mustupper=False, mustuniq=True,
                 whitespace_ok=True, repeating_whitespace_ok=False,
                 defname='WPT'):
        self.length = length
        self.badchars = badchars
        self.mustupper = mustupper
        self.mustuniq = mustuniq
        self.whitespace_ok = whitespace_ok
        self.repeating_whitespace_ok = repeating_whitespace_ok
        self.defname = defname
        #: names handed out so far, with their number of conflicts
        self.names = {}

    def mkshort(self, name):
        """Return a short name for the given name.

        :param name: free-text name
        :type name: str or None
        :return: short name of at most ``length`` characters
        :rtype: str

        """
        name = name or ''
        if self.badchars:
            name = re.sub(f'[{re.escape(self.badchars)}]', '', name)
        if not self.whitespace_ok:
            name = re.sub(r'\s+', '', name)
        elif not self.repeating_whitespace_ok:
            name = re.sub(r'\s{2,}', ' ', name)
        name = name.strip()
        if self.mustupper:
            name = name.upper()
        name = self.delete_vowels(name)
        name = name[:self.length]
        if not name:
            name = self.defname[:self.length]
        if self.mustuniq:
            name = self.make_unique(name)
        return name

    def mkshort_from_wpt(self, waypoint):
        """Return a short name synthesized from the waypoint.

        The description is preferred over the comment, and the comment over the
        name.

        """
        name = waypoint.description or waypoint.comment or waypoint.name
        return self.mkshort(name)

    def delete_vowels(self, name):
        chars = list(name)
        idx = len(chars) - 1
        while len(chars) > self.length and idx > 0:
            if chars[idx] in self.vowels and not chars[idx - 1].isspace():
                del chars[idx]
            idx -= 1
        return ''.join(chars)

    def make_unique(self, name):
        if name not in self.names:
            self.names[name] = 0
            return name
        while True:
            self.names[name] += 1
            suffix = f'.{self.names[name]}'
            candidate = name[:self.length - len(suffix)] + suffix
            if candidate not in self.names:
                mod_logger.log.info(f"Renaming duplicate name {name} to {candidate}")
                self.names[candidate] = 0
                return candidate
