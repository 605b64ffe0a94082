"""
Flux Git

Project-structure-aware git commands: target resolution, file selection
and conventional commit message synthesis for feature-based layouts.
"""

__version__ = "1.0.0"

# Default feature root every target is resolved against.
FEATURES_ROOT = "src/features/"

# Commit types the message synthesizer can emit
COMMIT_TYPES = {
    'feat': 'A new feature, endpoint or contract',
    'fix': 'Logic changes, with or without tests',
    'test': 'Adding or updating tests',
    'docs': 'Specification, requirement or instruction changes',
    'chore': 'Everything else, including checkpoints',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())
