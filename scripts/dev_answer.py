import sys

from pdf_rag.clients import build_embedder, build_generator, build_openai_client, build_vector_database
from pdf_rag.config import get_settings
from pdf_rag.retrieval import answer


def main():
    if len(sys.argv) > 1:
        query = " ".join(sys.argv[1:]).strip()
    else:
        query = input("Enter your question: ").strip()

    if not query:
        print("No query provided.")
        return

    settings = get_settings()
    client = build_openai_client(settings)
    database = build_vector_database(settings)

    print(f"\nRunning RAG answer() for query: {query!r}\n")

    result = answer(
        query,
        index=database.index(settings.index_name),
        embedder=build_embedder(settings, client),
        generator=build_generator(settings, client),
        namespace=settings.pdf_namespace,
        k=settings.top_k,
    )

    ans = result.get("answer", "")
    sources = result.get("sources", [])

    print("=== ANSWER ===")
    print(ans or "[No answer generated]")
    print("\n=== SOURCES ===")

    if not sources:
        print("[No sources available]")
        return

    for i, src in enumerate(sources, start=1):
        source_path = src.get("source", "unknown")
        page = src.get("page")
        score = src.get("score")
        snippet = src.get("snippet", "")

        score_str = f"{score:.4f}" if isinstance(score, (int, float)) else str(score)

        print(f"\n[{i}] source={source_path} page={page} score={score_str}")
        print(f"    {snippet}")


if __name__ == "__main__":
    main()
