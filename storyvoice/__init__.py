"""StoryVoice DSP: post-processing service for text-to-speech audio."""

__version__ = "0.1.0"
