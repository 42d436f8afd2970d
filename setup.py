from setuptools import setup


setup_options = dict(
    name="kalmanfilter",
    version="1.0",
    description="Linear Kalman filter, system discretization and observability analysis",
    license="MIT",
    packages=["kalmanfilter"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.8",
    install_requires=["numpy", "scipy", "pandas"],
    extras_require={"test": ["pytest"]},
)

setup(**setup_options)
