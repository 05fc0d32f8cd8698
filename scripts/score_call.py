import asyncio
import json
import os
import sys

# Add project root to path so we can import callscore
sys.path.append(os.getcwd())

from callscore.pipelines.scoring import ScoringPipeline, guess_content_type
from callscore.services.history_store import ScoredRecord
from callscore.services.llm_client import BedrockLlmClient


async def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/score_call.py path/to/call.mp3 [mime-type]")
        return

    file_path = sys.argv[1]
    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found.")
        return

    mime_type = sys.argv[2] if len(sys.argv) > 2 else guess_content_type(file_path)

    print(f"Reading {file_path} ({mime_type})...")
    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    outcome = await ScoringPipeline(BedrockLlmClient()).run(audio_bytes, mime_type)

    print("\n--- Transcript ---")
    print(outcome.transcript or "<none>")
    print("------------------")
    for timing in outcome.timings:
        print(f"{timing.state.value:<13} {timing.duration_seconds:.2f}s")

    if not outcome.succeeded:
        print(f"\n{outcome.error.category}: {outcome.error}")
        print(json.dumps(outcome.error.to_payload(), indent=2, ensure_ascii=False))
        sys.exit(1)

    record = ScoredRecord.from_analysis(outcome.result)
    print(f"\nTotal score: {record.total_score}/100")
    for card in record.breakdown():
        print(f"  {card['name']:<22} {card['score']:>3}/{card['maxScore']}")
    print(f"\nFeedback: {record.overall_feedback}")
    print(f"Observation: {record.observation}")


if __name__ == "__main__":
    asyncio.run(main())
