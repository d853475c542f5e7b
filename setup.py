from setuptools import setup, find_packages

setup(
    name="rehearse",
    version="0.1.0",
    description="Interview practice: record an answer, get it transcribed and scored",
    author="",
    python_requires=">=3.8",
    packages=find_packages(include=["rehearse", "rehearse.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "google-cloud-speech>=2.21.0",
        "google-auth>=2.10.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "video": ["opencv-python-headless>=4.5.0"],
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "rehearse=rehearse.main:main",
        ],
    },
)
