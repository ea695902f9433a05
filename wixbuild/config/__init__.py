# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Build options and settings files for wixbuild.

Options for a build come from three places, highest precedence first:

  - Command-line flags (stored directly on BuildConfiguration)
  - Project settings (<project root>/wix/wixbuild.yaml)
  - User defaults ($WIXBUILD_CONFIG or ~/.config/wixbuild/config.yaml)

Anything still unset falls back to the project manifest (Cargo.toml).

Public API:

- BuildConfiguration: Mutable set of overrides for one build
- load_settings: Load and merge YAML settings for a project
- apply_settings: Fill unset BuildConfiguration fields from settings

Example:
    from pathlib import Path
    from wixbuild.config import BuildConfiguration, apply_settings, load_settings

    config = BuildConfiguration(sign=True)
    apply_settings(config, load_settings(Path(".")))
"""

from .loader import apply_settings, load_settings
from .options import BuildConfiguration

__all__ = ["BuildConfiguration", "apply_settings", "load_settings"]
