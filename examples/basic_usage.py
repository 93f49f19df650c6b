"""Basic usage example for copycraft."""

import asyncio
from copycraft import ContentStore, SegmentProcessor, ClaudeCliGenerator, extract_segments


DRAFT = """# Tide Pools

<agent><prompt>Write a two sentence hook about tide pools.</prompt></agent>

# Safety

<agent><research>List three safety rules for visiting rocky shores.</research></agent>
"""


async def main():
    """Example of resolving task markers and storing the result as a page."""

    for segment in extract_segments(DRAFT):
        print(f"Task {segment.index} ({segment.kind.value}): {segment.prompt_text}")

    # Requires the claude command line tool on PATH
    processor = SegmentProcessor(ClaudeCliGenerator())
    result = await processor.process_all(DRAFT)

    store = ContentStore("./content")
    module_id = store.create_module("Coastal Field Guide")
    chapter_id = store.create_chapter(module_id, "Tide Pools")
    page_id = store.create_page(module_id, chapter_id.split("/")[1], "Introduction", result.content)

    print(f"Saved {result.processed_count} generated sections to {page_id}")


if __name__ == "__main__":
    asyncio.run(main())
