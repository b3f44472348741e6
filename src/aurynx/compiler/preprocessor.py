import re

# PHP identifiers may contain any byte >= 0x80; we accept the equivalent
# code points.
IDENTIFIER = r"[a-zA-Z_\x80-\U0010ffff][a-zA-Z0-9_\x80-\U0010ffff]*"

# Single and double quoted PHP string literals.
STRING_LITERAL = r"'(?:\\.|[^\\'])*'|\"(?:\\.|[^\\\"])*\""

ACCESSOR_FUNCTION = "data_get"

_DOT_PATH_PATTERN = re.compile(
    rf"({STRING_LITERAL})|"  # Strings are left alone
    rf"(?<!::)(\${IDENTIFIER})\.([a-zA-Z0-9_]+(?:\.[a-zA-Z0-9_]+)*)",
    flags=re.DOTALL,
)


def accessor_call(variable: str, path: str) -> str:
    """Build the safe path-accessor call for ``variable`` (with ``$``) and ``path``."""
    return f"{ACCESSOR_FUNCTION}({variable}, '{path}')"


def rewrite_expression(expression: str) -> str:
    """
    Rewrite dot-notation data access into safe accessor calls.

    Example:
        $user.profile.name  ->  data_get($user, 'profile.name')

    The entire dotted path is passed as a single string argument. Plain
    variables, arrow member access ($user->name) and static properties are
    native PHP and stay as written. Text inside PHP string literals is never
    touched.
    """

    def replacer(match: re.Match) -> str:
        # If it matched a string (Group 1), return it unchanged
        if match.group(1):
            return match.group(1)

        return accessor_call(match.group(2), match.group(3))

    return _DOT_PATH_PATTERN.sub(replacer, expression)
