"""Media Localizer — transcribe, translate and script voice-overs for media.

WHY: Localizing a video starts with the same steps every time: get the
speech out of the file, transcribe it, translate it, and prepare a script
a voice artist can perform. This package runs those steps against a
hosted multimodal model and exports captions and voice-over scripts.

HOW: Four layers: media (audio extraction through ffmpeg), api (async
client for the transcribe / voice-over endpoints), core (upload session
state machine and orchestrator), formatters (SRT and script export).
The server package provides the endpoints themselves.

RULES:
- Only one upload session is active at a time
- Stages run strictly in sequence; each consumes the previous output
- The transcoding engine is an owned resource, never a global
"""

__version__ = "0.1.0"
