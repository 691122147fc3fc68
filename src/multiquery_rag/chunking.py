from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter

from .schema import Chunk, Document


def split_documents(
    documents: list[Document],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[Chunk]:
    """Split each document with a recursive character splitter.

    The splitter tries paragraph, line, and word boundaries before falling
    back to raw characters, so chunks stay at most `chunk_size` long.

    Args:
        documents: Page documents to chunk.
        chunk_size: Maximum number of characters per chunk.
        chunk_overlap: Characters shared between consecutive chunks.

    Returns:
        Chunk records preserving source document/page metadata.
    """
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        add_start_index=True,
        length_function=len,
    )

    chunks: list[Chunk] = []
    for document in documents:
        pieces = splitter.create_documents([document.text])
        for part, piece in enumerate(pieces):
            chunks.append(
                Chunk(
                    chunk_id=f"{document.doc_id}-C{part:03d}",
                    doc_id=document.doc_id,
                    source=document.source,
                    page=document.page,
                    start_index=int(piece.metadata.get("start_index", -1)),
                    text=piece.page_content,
                )
            )
    return chunks
