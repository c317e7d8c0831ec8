"""
Discovery of environment files and of the variables used to interpolate them.
"""
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import dotenv_values

from ..MODELS.environment import Environment
from ..PARSERS.environment_parser import EnvironmentParser
from ..errors import EnvironmentLoadError

logger = logging.getLogger(__name__)

EXTENSIONS = (".yaml", ".yml")


def default_search_paths() -> List[str]:
    return [
        os.path.join(str(Path.home()), ".devenv", "environments"),
        os.path.join(".", "environments"),
        ".",
    ]


class EnvironmentManager:
    """
    Locates and loads environment definitions.
    """
    def __init__(self,
                 search_paths: Optional[List[str]] = None,
                 env_file: Optional[str] = None):
        """
        Initializes the environment manager.

        :param search_paths: Directories searched in order. The first one is the catalog listed by list_environments.
        :param env_file: Optional .env file whose values extend the process environment during interpolation.
        """
        self.search_paths = search_paths if search_paths is not None else default_search_paths()
        self.parser = EnvironmentParser(self.interpolation_context(env_file))

    @staticmethod
    def interpolation_context(env_file: Optional[str] = None) -> Dict[str, str]:
        """
        Merges the process environment with an optional .env file; the file wins.
        """
        context = dict(os.environ)
        if env_file:
            if not os.path.exists(env_file):
                raise EnvironmentLoadError(f"env file not found: {env_file}")
            values = dotenv_values(env_file)
            context.update({k: v for k, v in values.items() if v is not None})
        return context

    def find(self, name: str) -> Optional[str]:
        """
        Finds the file defining environment ``name``.

        :return: The first matching path, or None.
        """
        for directory in self.search_paths:
            for ext in EXTENSIONS:
                path = os.path.join(directory, name + ext)
                if os.path.isfile(path):
                    return path
        return None

    def load(self, name: str) -> Environment:
        """
        Loads environment ``name`` from the search paths.

        :raises EnvironmentLoadError: If it is not found or invalid.
        """
        path = self.find(name)
        if path is None:
            raise EnvironmentLoadError(f"environment '{name}' not found")
        return self.parser.parse(path)

    def load_file(self, path: str) -> Environment:
        return self.parser.parse(path)

    def list_environments(self) -> List[Environment]:
        """
        Loads every valid environment file of the first search path.
        Unreadable or invalid files are skipped.
        """
        if not self.search_paths:
            return []
        directory = self.search_paths[0]
        if not os.path.isdir(directory):
            return []

        environments = []
        for entry in sorted(os.listdir(directory)):
            path = os.path.join(directory, entry)
            if not os.path.isfile(path) or not entry.endswith(EXTENSIONS):
                continue
            try:
                environments.append(self.parser.parse(path))
            except EnvironmentLoadError as e:
                logger.debug("Skipping %s: %s", path, e)
        return environments
