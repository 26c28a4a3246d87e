import sys

from .clients import build_embedder, build_generator, build_openai_client, build_vector_database
from .config import get_settings
from .errors import RagError
from .ingest import ingest_if_needed, provision_index
from .log import get_logger, setup_logging
from .retrieval import query_pdf

logger = get_logger("main")

DEFAULT_QUESTION = "What are the main topics discussed in the PDF?"


def run(question: str) -> str:
    """Ingest the configured PDF if needed, then answer `question`."""
    settings = get_settings()

    openai_client = build_openai_client(settings)
    database = build_vector_database(settings)
    embedder = build_embedder(settings, openai_client)

    # The provisioned handle serves both ingestion and the query
    index = provision_index(settings, database)
    ingested = ingest_if_needed(settings, index=index, embedder=embedder)
    if ingested:
        logger.info(f"Vector store initialized with {ingested} chunks")

    return query_pdf(
        question,
        index=index,
        embedder=embedder,
        generator=build_generator(settings, openai_client),
        namespace=settings.pdf_namespace,
        k=settings.top_k,
    )


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    question = " ".join(args).strip() or DEFAULT_QUESTION

    setup_logging()
    try:
        settings = get_settings()
        setup_logging(settings.log_level, json_format=settings.log_json)
        result = run(question)
    except RagError as e:
        logger.error(f"Error in main execution: {e.message}", extra=e.to_dict())
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error in main execution: {e}")
        return 1

    print("Query:", question)
    print("\n\nAnswer:", result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
