"""
Variable interpolation for environment files.
"""
import re
from typing import Dict, Optional

# $$ | ${NAME} | ${NAME:-default} | ${NAME:+alternative}
_PATTERN = re.compile(r'\$\$|\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([-+])([^}]*))?\}')


class EnvironmentInterpolator:
    """
    Expands ``${VAR}`` references in environment file text.
    Supports ${VAR}, ${VAR:-default}, ${VAR:+value} and ``$$`` for a literal ``$``.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str]) -> str:
        """
        Interpolates variables in the template string using the provided context.

        :param template: The string containing ${VAR} placeholders.
        :param context: Variable values.
        :return: The interpolated string.
        :raises KeyError: If a plain ${VAR} is not defined in the context.
        """
        def replace(match: "re.Match[str]") -> str:
            if match.group(0) == "$$":
                return "$"

            name = match.group(1)
            modifier: Optional[str] = match.group(2)
            alternative = match.group(3) or ""
            value = context.get(name)

            if modifier == "-":
                return value if value else alternative
            if modifier == "+":
                return alternative if value else ""
            if value is None:
                raise KeyError(f"Variable {name} is not set")
            return value

        return _PATTERN.sub(replace, template)
