"""
Custom Pygments lexer for Blade template highlighting

Used by the CLI to show a highlighted excerpt of a template when
compilation fails.

Token types:
- Comment: {{-- ... --}} comments
- Punctuation: Echo delimiters {{ }} and {!! !!}
- Keyword: Control-flow directives (e.g., @if, @foreach, @endif)
- Keyword.Declaration: Layout directives (e.g., @extends, @section, @yield)
- Name.Decorator: Any other directive, including custom ones
- Name.Tag: Component tags (<x-alert>, </x-alert>)
- Name.Attribute: Component attributes (type=, :message=)
- Name.Builtin: Plain HTML tags
"""

import re

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Comment,
    Other,
)

CONTROL_DIRECTIVES = (
    'if', 'elseif', 'else', 'endif', 'unless', 'endunless', 'isset', 'endisset',
    'empty', 'endempty', 'switch', 'case', 'break', 'continue', 'default', 'endswitch',
    'foreach', 'endforeach', 'for', 'endfor', 'while', 'endwhile',
    'auth', 'endauth', 'guest', 'endguest', 'can', 'endcan', 'cannot', 'endcannot',
)

LAYOUT_DIRECTIVES = (
    'extends', 'section', 'endsection', 'stop', 'show', 'yield',
    'include', 'includeIf', 'includeWhen', 'use',
    'hasSection', 'endhasSection', 'sectionMissing', 'endsectionMissing',
)


def _words(names: tuple) -> str:
    # longest first so "@endforeach" never matches as "@end" + text
    return "|".join(sorted(names, key=len, reverse=True))


class BladeLexer(RegexLexer):
    """
    Lexer for Blade-style templates

    Example:
        @if($user) <x-badge :name="$user->name"/> {{ $user->email }} @endif

    Tokens:
        @if → Keyword
        ($user) → Other
        <x-badge → Name.Tag
        :name= → Name.Attribute
        {{ → Punctuation
        $user->email → Other
        @endif → Keyword
    """

    name = 'Blade'
    flags = re.MULTILINE | re.DOTALL
    aliases = ['blade']
    filenames = ['*.blade.php']

    tokens = {
        'root': [
            # Comments
            (r'\{\{--.*?--\}\}', Comment.Multiline),

            # Verbatim blocks pass through as text
            (r'(@verbatim)(.*?)(@endverbatim)',
             bygroups(Keyword.Pseudo, Text, Keyword.Pseudo)),

            # Raw PHP blocks
            (r'(@php)(?!\s*\()(.*?)(@endphp)',
             bygroups(Keyword.Pseudo, Other, Keyword.Pseudo)),

            # Echoes
            (r'(\{!!)(.*?)(!!\})', bygroups(Punctuation, Other, Punctuation)),
            (r'(\{\{)(.*?)(\}\})', bygroups(Punctuation, Other, Punctuation)),

            # Control-flow directives
            (rf'@(?:{_words(CONTROL_DIRECTIVES)})\b', Keyword),

            # Layout directives
            (rf'@(?:{_words(LAYOUT_DIRECTIVES)})\b', Keyword.Declaration),

            # Any other directive
            (r'@[a-zA-Z_]\w*', Name.Decorator),

            # Component tags
            (r'(</?)(x-[a-zA-Z0-9\-_.]+)', bygroups(Punctuation, Name.Tag), 'component'),

            # HTML tags (pass through as-is)
            (r'<[^>]+>', Name.Builtin),

            # Argument lists after a directive
            (r'\(', Punctuation, 'arguments'),

            # Everything else is text
            (r'[^@<{(]+', Text),
            (r'.', Text),
        ],

        'component': [
            (r'/?>', Punctuation, '#pop'),
            (r'(:?\$?[\w\-]+)(=)', bygroups(Name.Attribute, Punctuation)),
            (r'"[^"]*"', String.Double),
            (r"'[^']*'", String.Single),
            (r'[\w\-]+', Name.Attribute),
            (r'\s+', Text),
            (r'.', Text),
        ],

        'arguments': [
            (r"'(?:\\.|[^'\\])*'", String.Single),
            (r'"(?:\\.|[^"\\])*"', String.Double),
            (r'\(', Punctuation, '#push'),
            (r'\)', Punctuation, '#pop'),
            (r'[^()\'"]+', Other),
        ],
    }


def get_lexer() -> BladeLexer:
    """
    Get the BladeLexer instance

    Returns:
        BladeLexer instance ready for use with Pygments
    """
    return BladeLexer()


def source_highlight(source: str) -> str:
    """
    Highlight template source for a terminal

    Args:
        source: Template text (usually an excerpt around an error)

    Returns:
        Source with ANSI colour codes
    """
    return highlight(source, get_lexer(), TerminalFormatter())
