import sys

from pdf_rag.clients import build_embedder, build_openai_client, build_vector_database
from pdf_rag.config import get_settings
from pdf_rag.retrieval import retrieve


def main():
    if len(sys.argv) > 1:
        query = " ".join(sys.argv[1:]).strip()
    else:
        query = input("Enter query: ").strip()

    if not query:
        print("No query provided")
        return

    settings = get_settings()
    database = build_vector_database(settings)
    embedder = build_embedder(settings, build_openai_client(settings))

    results = retrieve(
        query,
        index=database.index(settings.index_name),
        embedder=embedder,
        namespace=settings.pdf_namespace,
        k=settings.top_k,
    )

    if not results:
        print("No results found (namespace empty or query unmatched).")
        return

    print(f"Top {len(results)} results:")
    for i, r in enumerate(results, start=1):
        text = r.get("text", "") or ""
        source = r.get("source") or "unknown"
        page = r.get("page")
        score = r.get("score", None)

        snippet = text.replace("\n", " ")
        if len(snippet) > 200:
            snippet = snippet[:200] + "..."

        score_str = f"{score:.4f}" if isinstance(score, (int, float)) else str(score)

        print(f"\n[{i}] score={score_str} source={source} page={page}")
        print(f"    {snippet}")


if __name__ == "__main__":
    main()
