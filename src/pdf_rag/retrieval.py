from typing import Dict, List

from .errors import QueryError
from .log import get_logger

logger = get_logger("retrieval")

PROMPT_TEMPLATE = """Context from the PDF:
{context}

User Question: {question}

Please provide a detailed answer based on the context above. If the information is not found in the context, please indicate that."""


def retrieve(question: str, *, index, embedder, namespace: str, k: int = 3) -> List[Dict]:
    """
    Retrieve the top-k most similar chunks for a question.

    Returns a list of dicts, best match first, with:
      - text:   chunk text
      - source: original document path (if available)
      - page:   page number within the source (if available)
      - score:  provider similarity score or distance

    An empty namespace yields an empty list.
    """
    vector = embedder.embed_query(question)
    matches = index.query(vector, top_k=k, namespace=namespace)

    return [
        {
            "text": m.text,
            "source": m.metadata.get("source"),
            "page": m.metadata.get("page"),
            "score": m.score,
        }
        for m in matches
    ]


def build_context(chunks: List[Dict]) -> str:
    """Join chunk texts with a blank line, keeping rank order."""
    return "\n\n".join(ch.get("text", "") for ch in chunks)


def build_prompt(context: str, question: str) -> str:
    return PROMPT_TEMPLATE.format(context=context, question=question)


def answer(
    question: str,
    *,
    index,
    embedder,
    generator,
    namespace: str,
    k: int = 3,
) -> Dict:
    """
    High-level QA function for the assistant.

        - Uses 'retrieve' to get the top-k chunks from `namespace`.
        - Builds a grounded prompt from the chunk texts and the question.
        - Calls the generator, even when nothing was retrieved; the model
          is expected to say the context holds no answer.
        - Returns a dict with:
            {
                "answer": str,
                "sources": List[Dict]    # each with source, page, score, snippet
            }

    Raises QueryError for an empty question or any embedding, search or
    generation failure.
    """
    question = (question or "").strip()
    if not question:
        raise QueryError("Question must be non-empty")

    try:
        # 1. Retrieve context chunks
        chunks = retrieve(question, index=index, embedder=embedder, namespace=namespace, k=k)
        logger.info(f"Retrieved {len(chunks)} chunks from namespace \"{namespace}\"")

        # 2. Build the prompt
        prompt = build_prompt(build_context(chunks), question)

        # 3. Generate
        answer_text = generator.generate(prompt)
    except Exception as e:
        logger.error(f"Error querying PDF: {e}")
        raise QueryError(f"Could not answer question: {e}", details={"namespace": namespace}) from e

    # 4. Shape sources payload (trim text to short snippet)
    sources: List[Dict] = []
    for ch in chunks:
        text = (ch.get("text") or "").replace("\n", " ")
        snippet = text[:200] + "..." if len(text) > 200 else text
        sources.append(
            {
                "source": ch.get("source") or "unknown",
                "page": ch.get("page"),
                "score": ch.get("score"),
                "snippet": snippet,
            }
        )

    return {
        "answer": answer_text,
        "sources": sources,
    }


def query_pdf(question: str, *, index, embedder, generator, namespace: str, k: int = 3) -> str:
    """Answer `question` from the namespace and return only the generated text."""
    result = answer(question, index=index, embedder=embedder, generator=generator, namespace=namespace, k=k)
    return result["answer"]
