"""
Transcribe stage: audio artifact -> transcript text.
"""

from vidscribe.config import Settings
from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch
from vidscribe.services.stages.base import BaseStage
from vidscribe.services.transcriber import WhisperTranscriber


class TranscribeStage(BaseStage):
    """Transcribe the acquired audio via the speech-to-text API.

    Input (from state):
        - artifact_path: Audio file from the acquire stage
        - source_text: Text input, used as the transcript as-is

    Output fields:
        transcript

    Example:
        stage = TranscribeStage(WhisperTranscriber(whisper_client), settings)
        patch = await stage.run(state)
    """

    name = PipelineStage.TRANSCRIBING
    failure_label = "Transcription"

    def __init__(self, transcriber: WhisperTranscriber, settings: Settings):
        """Initialize transcribe stage.

        Args:
            transcriber: Speech-to-text service
            settings: Application settings
        """
        self.transcriber = transcriber
        self.timeout = settings.transcribe_timeout

    async def run(self, state: PipelineState) -> StagePatch:
        # Text input: no audio to transcribe
        if state.source_text and not state.url:
            return self.succeeded(
                f"Text input used as transcript ({len(state.source_text)} chars)",
                transcript=state.source_text,
            )

        if state.artifact_path is None:
            return self.skipped("no audio artifact")

        text = await self.transcriber.transcribe(state.artifact_path)
        if not text.strip():
            return self.failed("empty transcript")

        return self.succeeded(f"Transcribed ({len(text)} chars)", transcript=text)
