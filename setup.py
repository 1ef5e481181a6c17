from setuptools import setup

setup(
    name='nurbspy',
    version='0.0.1',
    description="Library for evaluating and inverting rational b-spline curves and parametric surface patches",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    license='MIT',
    packages=['nurbspy'],
    python_requires='>=3.8',
    install_requires=['numpy'],
    extras_require={'test': ['pytest', 'scipy']},
    keywords=['nurbs', 'bspline', 'b-spline', 'surface of revolution', 'inverse evaluation'],
    classifiers=[
        'License :: OSI Approved :: MIT License',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Operating System :: OS Independent',
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Programming Language :: Python :: 3',
    ]
)
