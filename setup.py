"""
Setup script for learnpath.

learnpath derives what a learner sees on the progress pages of a
self-paced course:

1. Lesson progression - effective status per lesson (sequential unlock)
2. Module mastery - per-module mastery level and overall completion
3. Review analytics - card-state histogram, weekly activity, heatmap

The 'learnpath' command is a read-only inspection CLI over a content
manifest and the progress store.
"""

from setuptools import find_packages, setup

setup(
    name="learnpath",
    version="0.3.0",
    description="Lesson progression, module mastery and review analytics for self-paced courses",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["learnpath", "learnpath.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "learnpath=learnpath.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition progression mastery education",
)
