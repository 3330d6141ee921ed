"""
Site configuration: load, validate, and provide defaults for site.yaml.

site.yaml is optional. Without it the build uses the defaults below.
"""

import os
import sys

try:
    import yaml
except ImportError:
    print("Error: PyYAML is required. Install with: pip install pyyaml")
    sys.exit(1)

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError


CONFIG_NAME = "site.yaml"

DEFAULTS = {
    "output_dir": "output",
    "template": "template.html",
    "domain": "chitin.io",
    "branch": "refs/heads/autogenerated",
    "index_file": None,
    "push_url": "https://github.com/chitin-io/chitin-io.github.io",
    "dot_command": ["dot", "-Tsvg"],
    "git": True,
}


class ConfigError(Exception):
    """Raised when site.yaml or the page template is missing or invalid."""
    pass


class SiteConfig:
    """
    Loaded, validated site configuration.

    Usage:
        config = SiteConfig.load(root)
        config.output_dir      # "output"
        config.output_path     # "<root>/output"
        layout = config.load_template()
    """

    def __init__(self, data, root):
        self._data = data
        self.root = root

    @classmethod
    def load(cls, root):
        """Load and validate site.yaml from the tree root, if present."""
        yaml_path = os.path.join(root, CONFIG_NAME)
        data = {}
        if os.path.exists(yaml_path):
            with open(yaml_path, encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigError(f"{CONFIG_NAME} is not valid YAML: {e}") from e
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ConfigError(
                    f"{CONFIG_NAME} must be a YAML mapping, got {type(data).__name__}"
                )
        return cls.from_dict(data, root)

    @classmethod
    def from_dict(cls, data, root):
        unknown = sorted(set(data) - set(DEFAULTS))
        if unknown:
            raise ConfigError(f"{CONFIG_NAME} has unknown fields: {', '.join(unknown)}")

        merged = dict(DEFAULTS)
        merged.update(data)
        if not isinstance(merged["dot_command"], list):
            raise ConfigError("dot_command must be a list, e.g. [dot, -Tsvg]")
        merged["dot_command"] = list(merged["dot_command"])

        cls._validate(merged)
        return cls(merged, root)

    @staticmethod
    def _validate(data):
        output_dir = data["output_dir"]
        if not isinstance(output_dir, str) or not output_dir.strip():
            raise ConfigError("output_dir must be a non-empty string")
        norm = os.path.normpath(output_dir)
        if os.path.isabs(norm) or norm == "." or norm.split(os.sep)[0] == "..":
            raise ConfigError(f"output_dir must be a directory inside the tree: {output_dir}")

        domain = data["domain"]
        if not isinstance(domain, str) or not domain.strip() or "\n" in domain:
            raise ConfigError("domain must be a single non-empty line")

        branch = data["branch"]
        if not isinstance(branch, str) or not branch.startswith("refs/"):
            raise ConfigError(f"branch must be a full ref name (refs/...): {branch}")

        cmd = data["dot_command"]
        if not cmd or not all(isinstance(arg, str) for arg in cmd):
            raise ConfigError("dot_command must be a non-empty list of strings")

        if not isinstance(data["git"], bool):
            raise ConfigError("git must be true or false")

    # ── Attribute access ───────────────────────────────────

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"SiteConfig has no field '{name}'")

    def get(self, key, default=None):
        return self._data.get(key, default)

    def __getitem__(self, key):
        return self._data[key]

    # ── Convenience ────────────────────────────────────────

    @property
    def output_dir(self):
        """Output directory relative to the root, normalised."""
        return os.path.normpath(self._data["output_dir"])

    @property
    def output_path(self):
        return os.path.join(self.root, self.output_dir)

    @property
    def branch_name(self):
        """Short branch name for user-facing hints."""
        prefix = "refs/heads/"
        if self.branch.startswith(prefix):
            return self.branch[len(prefix):]
        return self.branch

    def load_template(self):
        """Parse the page template once; ConfigError if it is missing or broken."""
        path = os.path.join(self.root, self.template)
        if not os.path.isfile(path):
            raise ConfigError(f"template not found: {path}")

        env = Environment(
            loader=FileSystemLoader(os.path.dirname(path)),
            autoescape=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        try:
            return env.get_template(os.path.basename(path))
        except TemplateError as e:
            raise ConfigError(f"cannot parse template {path}: {e}") from e

    def summary(self):
        """Print a short config summary."""
        print(f"\n  Source: {self.root}")
        print(f"  Output: {self.output_path}")
        print(f"  Domain: {self.domain}")
        if self.git:
            print(f"  Branch: {self.branch}")
