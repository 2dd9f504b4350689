# ABOUTME: bookmeta resolves book queries against Google Books and Open Library.
# ABOUTME: See bookmeta.core.resolver.build_resolver for the main entry point.
