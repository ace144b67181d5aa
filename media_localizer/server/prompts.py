"""System prompts and emotion directions for the upstream model.

WHY: The two handlers differ only in what they ask the model to do.
Keeping the prompt text and the emotion table as data makes them easy
to review and keeps the handlers free of string building.

RULES:
- EMOTION_DIRECTIONS has exactly one entry per config.EMOTIONS value
- Unknown emotions fall back to the neutral direction
- The translation block is appended only when a target language is set
"""

from __future__ import annotations

from typing import Optional

EMOTION_DIRECTIONS = {
    "neutral": "Speak in a calm, professional, and neutral tone. Clear and straightforward delivery.",
    "happy": "Speak with warmth, enthusiasm, and joy. Let a smile come through in the voice. Upbeat and positive energy.",
    "sad": "Speak with a softer, more subdued tone. Convey empathy and gentle melancholy. Slower pacing.",
    "excited": "Speak with high energy and enthusiasm! Dynamic pacing, emphasizing key words with passion and excitement.",
    "serious": "Speak with gravitas and authority. Measured, deliberate pacing. Professional and formal tone.",
    "friendly": "Speak in a warm, approachable, conversational manner. Like talking to a good friend.",
    "dramatic": "Speak with theatrical flair and emotional intensity. Varied pacing and emphasis for maximum impact.",
    "calm": "Speak in a soothing, peaceful manner. Slow, measured pacing. Perfect for meditation or relaxation content.",
}

TRANSCRIPTION_PROMPT = """You are an expert transcription assistant. Transcribe the audio/video content accurately.

Rules:
- Transcribe all spoken words exactly as heard
- Include speaker identification if multiple speakers (e.g., "Speaker 1:", "Speaker 2:")
- Include timestamps in [HH:MM:SS] format at natural breaks (every 30 seconds or at paragraph breaks)
- Preserve the original language of the content
- Note any significant non-speech sounds in [brackets] like [music], [applause], [laughter]
- If parts are unclear, mark them as [inaudible]
- Format the output as clean, readable paragraphs"""

TRANSLATION_BLOCK = """

After the transcription, also provide a translation to {language}.
Format the output as:
--- ORIGINAL TRANSCRIPTION ---
[original content]

--- TRANSLATION ({language}) ---
[translated content]"""

TRANSCRIBE_USER_TEXT = "Please transcribe the following audio/video content:"

VOICEOVER_PROMPT = """You are an expert voice director and script adapter. Your task is to prepare text for voice-over recording by adding emotional cues, pacing notes, and emphasis markers.

Emotion Style: {emotion_upper}
Voice Direction: {direction}
Target Language: {language}

Transform the provided text into a professional voice-over script with:
1. [PAUSE] markers for natural breathing points
2. *emphasis* on key words
3. (emotional cues) in parentheses where tone should shift
4. // pacing notes // for speed changes
5. Phonetic guides for difficult words if needed

Make the script feel natural and emotionally authentic for the {emotion} style."""


def emotion_direction(emotion: str) -> str:
    return EMOTION_DIRECTIONS.get(emotion, EMOTION_DIRECTIONS["neutral"])


def transcription_prompt(target_language: Optional[str] = None) -> str:
    prompt = TRANSCRIPTION_PROMPT
    if target_language:
        prompt += TRANSLATION_BLOCK.format(language=target_language)
    return prompt


def voiceover_prompt(emotion: str, language: str) -> str:
    return VOICEOVER_PROMPT.format(
        emotion=emotion,
        emotion_upper=emotion.upper(),
        direction=emotion_direction(emotion),
        language=language,
    )


def voiceover_user_message(text: str, emotion: str, language: str) -> str:
    return "Please prepare this text for {} voice-over in {}:\n\n{}".format(emotion, language, text)
